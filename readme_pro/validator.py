# readme_pro/validator.py
"""
Validation of wizard input.

Checks run before moving to the next step and before generation:
- Step 1: API key format for the selected provider
- Step 2: project name and short description are present
- Step 6: a custom tone has text
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from .form_state import CUSTOM_TONE_MARKER

logger = logging.getLogger(__name__)

OPENAI_KEY_PREFIX = "sk-"
OPENAI_MIN_KEY_LENGTH = 40
GEMINI_KEY_PREFIX = "AIzaSy"
GEMINI_KEY_LENGTH = 39


@dataclass
class ValidationResult:
    """Result of validating one wizard step."""
    passed: bool = True
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> Optional[str]:
        """First error, which is what the wizard shows."""
        return self.errors[0] if self.errors else None

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.passed = False


def validate_api_key_format(provider: str, key: Optional[str]) -> ValidationResult:
    """
    Check that an API key looks like one the provider issues.

    Args:
        provider: 'openai' or 'gemini'; other providers only need a non-empty key
        key: The key as typed

    Returns:
        ValidationResult with at most one error
    """
    result = ValidationResult()
    key = (key or "").strip()
    if not key:
        result.add_error("API Key cannot be empty.")
        return result

    if provider == "openai":
        if not key.startswith(OPENAI_KEY_PREFIX):
            result.add_error('Invalid OpenAI key format. It should start with "sk-".')
        elif len(key) < OPENAI_MIN_KEY_LENGTH:
            result.add_error("OpenAI key appears to be too short.")
    elif provider == "gemini":
        if not key.startswith(GEMINI_KEY_PREFIX):
            result.add_error('Invalid Gemini key format. It should start with "AIzaSy".')
        elif len(key) != GEMINI_KEY_LENGTH:
            result.add_error(f"Invalid Gemini key format. It should be {GEMINI_KEY_LENGTH} characters long.")
    return result


def validate_step(step: int, fields: Mapping[str, Any]) -> ValidationResult:
    """
    Validate the widget values relevant to one wizard step.

    Args:
        step: Current step number (1-based)
        fields: Raw widget values, including ``apiKey`` and ``apiProvider``

    Returns:
        ValidationResult for that step
    """
    result = ValidationResult()

    if step == 1:
        key_result = validate_api_key_format(str(fields.get("apiProvider") or ""), fields.get("apiKey"))
        for error in key_result.errors:
            result.add_error(error)

    elif step == 2:
        if not str(fields.get("projectName") or "").strip():
            result.add_error("Project Name is a required field.")
        elif not str(fields.get("description") or "").strip():
            result.add_error("Short Description is a required field.")

    elif step == 6:
        if fields.get("tone") == CUSTOM_TONE_MARKER and not str(fields.get("customTone") or "").strip():
            result.add_error("Please define your custom tone or choose another option from the list.")

    if not result.passed:
        logger.debug(f"Step {step} validation failed: {result.message}")
    return result
