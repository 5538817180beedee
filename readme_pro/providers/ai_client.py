# readme_pro/providers/ai_client.py
"""
Minimal client for the hosted AI providers used to write READMEs.
- Pure stdlib (urllib)
- Gemini: POST .../v1beta/models/<model>:generateContent?key=<api key>
- OpenAI: POST https://api.openai.com/v1/chat/completions

Failed requests raise AIProviderError carrying the HTTP status when there is
one. There are no automatic retries: a failed generation is reported and the
user decides whether to try again.

Usage:
    from readme_pro.providers.ai_client import AIClient
    text = AIClient().generate(prompt, "gemini", api_key)

Environment overrides:
    README_PRO_OPENAI_MODEL
    README_PRO_GEMINI_MODEL
    README_PRO_TIMEOUT
"""

from __future__ import annotations
import http.client
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple
import urllib.error
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..exceptions import AIProviderError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "gemini")

ERROR_MESSAGES: Dict[str, Dict[int, str]] = {
    "gemini": {
        400: "Bad request. The AI model could not process the input. Please check your form data.",
        401: "Invalid API Key. Please verify your Gemini API key in Step 1.",
        403: "Permission Denied. Your Gemini API key may not have the correct permissions.",
        429: "Rate Limit Exceeded. You have made too many requests. Please wait a while before trying again.",
        500: "Google AI Server Error. Please try again later.",
        503: "Service Unavailable. Google AI service is temporarily down. Please try again later.",
    },
    "openai": {
        400: "Bad request. The AI model could not process the input. Please check your form data.",
        401: "Invalid API Key. Please verify your OpenAI API key in Step 1.",
        402: "Insufficient Credits. Please check your OpenAI account balance.",
        429: "Rate Limit Exceeded. You have made too many requests. Please wait a while before trying again.",
        500: "OpenAI Server Error. Please try again later.",
        503: "Service Unavailable. OpenAI service is temporarily overloaded. Please try again later.",
    },
}

NETWORK_ERROR_MESSAGE = "An unknown network error occurred. Please check your connection and try again."


@dataclass
class AIConfig:
    openai_url: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-3.5-turbo"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_model: str = "gemini-1.5-flash-latest"
    timeout_seconds: int = 120


class AIClient:
    def __init__(self, cfg: Optional[AIConfig] = None, opener: Callable[..., Any] = urlopen) -> None:
        cfg = cfg or AIConfig()
        self.openai_url = cfg.openai_url
        self.openai_model = os.getenv("README_PRO_OPENAI_MODEL") or cfg.openai_model
        self.gemini_base = cfg.gemini_base_url.rstrip("/")
        self.gemini_model = os.getenv("README_PRO_GEMINI_MODEL") or cfg.gemini_model
        self.timeout = int(os.getenv("README_PRO_TIMEOUT") or cfg.timeout_seconds)
        self._open = opener

    def _build_request(self, provider: str, api_key: str, prompt: str) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        if provider == "gemini":
            url = f"{self.gemini_base}/{self.gemini_model}:generateContent?key={quote(api_key, safe='')}"
            headers = {"Content-Type": "application/json"}
            body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        elif provider == "openai":
            url = self.openai_url
            headers = {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            }
            body = {"model": self.openai_model, "messages": [{"role": "user", "content": prompt}]}
        else:
            raise AIProviderError(f"Unsupported API provider: {provider}")
        return url, headers, body

    def generate(self, prompt: str, provider: str, api_key: str) -> str:
        url, headers, body = self._build_request(provider, api_key, prompt)
        req = Request(url, data=json.dumps(body).encode("utf-8"), headers=headers, method="POST")
        logger.info(f"Requesting README from {provider}")

        try:
            with self._open(req, timeout=self.timeout) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            message = _error_message_from_body(e) or f"API request failed with status {e.code}"
            logger.warning(f"{provider} request failed with status {e.code}: {message}")
            raise AIProviderError(message, status=e.code) from e
        except urllib.error.URLError as e:
            raise AIProviderError(f"Failed to reach {provider}: {e.reason}") from e
        except (OSError, http.client.HTTPException) as e:
            raise AIProviderError(f"Connection to {provider} failed: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AIProviderError(f"Failed to decode {provider} response: {e}") from e

        return _extract_text(provider, data)


def _error_message_from_body(error: urllib.error.HTTPError) -> Optional[str]:
    try:
        payload = json.loads(error.read().decode("utf-8"))
    except Exception:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return payload["error"].get("message")
    return None


def _extract_text(provider: str, data: Any) -> str:
    try:
        if provider == "gemini":
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        else:
            text = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        label = "Gemini" if provider == "gemini" else "OpenAI"
        raise AIProviderError(f"Invalid response from {label} API") from e
    if not isinstance(text, str):
        raise AIProviderError(f"Invalid response from {provider} API")
    return text


def get_api_error_message(error: BaseException, provider: str) -> str:
    """
    Map a generation failure to a message for the user.

    Known provider status codes get a tailored message; anything else falls
    back to the error's own text.
    """
    status = getattr(error, "status", None)
    if status is None:
        return str(error) or NETWORK_ERROR_MESSAGE

    known = ERROR_MESSAGES.get(provider, {}).get(int(status))
    if known:
        return known
    return str(error) or f"An unexpected error occurred (Status: {status})."
