# readme_pro/share_codec.py

"""
Shareable links for form snapshots.

A snapshot is stripped of secrets, serialized to canonical JSON, deflated
and base64-encoded. The token travels in the URL fragment (``#data=...``) so
it never reaches a server log.
"""

import base64
import binascii
import json
import logging
import zlib
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import urldefrag

from .exceptions import CorruptShareLinkError
from .form_state import FormState, strip_secrets

logger = logging.getLogger(__name__)

FRAGMENT_MARKER = "#data="
# Upper bound on the inflated JSON of a single snapshot
MAX_PAYLOAD_BYTES = 1024 * 1024


def _canonical_json(form_state: Mapping[str, Any]) -> bytes:
    return json.dumps(
        form_state, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def encode(form_state: Mapping[str, Any]) -> str:
    """
    Encode a snapshot as a URL-safe token.

    Args:
        form_state: The form data to share; secret fields are dropped

    Returns:
        URL-safe base64 of the deflated canonical JSON, without padding
    """
    compressed = zlib.compress(_canonical_json(strip_secrets(form_state)), 9)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decode(token: str) -> FormState:
    """
    Decode a token produced by :func:`encode`.

    Both base64 alphabets are accepted and padding is optional.

    Raises:
        CorruptShareLinkError: If any stage fails; no partial state is returned
    """
    try:
        normalized = (token or "").strip().replace("-", "+").replace("_", "/")
        if not normalized:
            raise ValueError("empty token")
        normalized += "=" * (-len(normalized) % 4)
        compressed = base64.b64decode(normalized, validate=True)
        inflater = zlib.decompressobj()
        raw = inflater.decompress(compressed, MAX_PAYLOAD_BYTES)
        if inflater.unconsumed_tail:
            raise ValueError(f"payload exceeds {MAX_PAYLOAD_BYTES} bytes")
        if not inflater.eof:
            raise ValueError("truncated payload")
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.error(f"Failed to decode shareable link: {e}")
        raise CorruptShareLinkError() from e

    if not isinstance(data, dict):
        logger.error("Shareable link payload is not an object")
        raise CorruptShareLinkError()
    return data


def build_share_url(base_url: str, form_state: Mapping[str, Any]) -> str:
    """Return ``base_url`` (fragment removed) with the snapshot in its fragment."""
    clean_url, _ = urldefrag(base_url)
    return f"{clean_url}{FRAGMENT_MARKER}{encode(form_state)}"


def extract_token(url: str) -> Optional[str]:
    """The token from a share URL, or None when the fragment carries no marker."""
    _, fragment = urldefrag(url)
    marker = FRAGMENT_MARKER[1:]
    if not fragment.startswith(marker):
        return None
    return fragment[len(marker):]


def consume_share_url(url: str) -> Tuple[Optional[FormState], str]:
    """
    Import a shared snapshot from a URL once.

    Returns:
        ``(form_state, cleaned_url)`` where the cleaned URL has the fragment
        removed so a reload does not import again; ``(None, url)`` when the
        URL carries no share token

    Raises:
        CorruptShareLinkError: If the token is present but cannot be decoded
    """
    token = extract_token(url)
    if token is None:
        return None, url
    form_state = decode(token)
    clean_url, _ = urldefrag(url)
    return form_state, clean_url
