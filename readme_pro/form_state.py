# readme_pro/form_state.py

"""
Form state model for the README wizard.

A FormState is a flat mapping of field name to value (strings for text
inputs and selects, booleans for checkboxes). It is passed explicitly between
the persistence layer, the share codec and prompt assembly; nothing here
holds module-level mutable state.

Field categories:
- Descriptive fields (project name, description, tone, ...)
- Inclusion flags (which README sections are requested)
- Secret fields (API key and provider), which never leave live memory
  except through the encrypted remember-me slot
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .utils.text_utils import TextUtils

FormState = Dict[str, Any]

NOT_SURE = "not-sure"
CUSTOM_TONE_MARKER = "custom"
DEFAULT_TONE = "professional"
STANDARD_TONES = (
    "professional",
    "friendly",
    "casual",
    "technical",
    "enthusiastic",
    "ai-decide",
)

SECRET_FIELDS = ("apiKey", "apiProvider")

DESCRIPTIVE_FIELDS = (
    "projectName",
    "description",
    "fileStructure",
    "projectType",
    "mainLanguage",
    "frameworks",
    "dependencies",
    "features",
    "demo",
    "installation",
    "usage",
    "requirements",
    "license",
    "author",
    "contact",
    "acknowledgments",
    "tone",
    "customTone",
)

FLAG_DEFAULTS: Dict[str, bool] = {
    "includeInstall": True,
    "includeUsage": True,
    "includeContrib": True,
    "includeAPI": False,
}

# Fields inspected for the uncertainty sentinel when assembling prompts
UNSURE_CHECK_FIELDS = (
    "projectType",
    "mainLanguage",
    "frameworks",
    "dependencies",
    "features",
    "installation",
    "usage",
    "requirements",
    "license",
)

TOTAL_STEPS = 6


class ViewState(Enum):
    """Which view of the wizard is active."""
    FORM = "form"
    LOADING = "loading"
    RESULT = "result"
    AB_TEST = "ab-test"

    @property
    def suppresses_autosave(self) -> bool:
        return self is not ViewState.FORM


@dataclass
class Draft:
    """An autosaved snapshot tied to a wizard step."""
    step: int
    form_data: FormState = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"step": self.step, "formData": self.form_data}


@dataclass
class Template:
    """A user-named snapshot kept for reuse across projects."""
    name: str
    data: FormState = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "data": self.data}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Template":
        return cls(name=str(raw["name"]), data=dict(raw.get("data") or {}))


@dataclass
class RememberedCredential:
    """
    A provider/key pair restored from the remember-me slot.

    ``restore_failed`` is set when the opt-in flag and the encrypted key were
    present but decryption produced nothing usable.
    """
    provider: str
    key: str
    restore_failed: bool = False


def strip_secrets(state: Mapping[str, Any]) -> FormState:
    """Return a copy of ``state`` without the secret fields."""
    return {k: v for k, v in state.items() if k not in SECRET_FIELDS}


def apply_defaults(state: Mapping[str, Any]) -> FormState:
    """Fill in inclusion flags missing from older snapshots."""
    merged: FormState = dict(FLAG_DEFAULTS)
    merged.update(state)
    return merged


def is_standard_tone(tone: Optional[str]) -> bool:
    return tone in STANDARD_TONES


def normalize_tone(tone: Optional[str], custom_tone: Optional[str] = None) -> str:
    """
    Resolve the tone select into the value stored in FormState.

    The ``custom`` marker is replaced with the user's own text, falling back
    to the default tone when that text is blank.
    """
    if tone == CUSTOM_TONE_MARKER:
        return (custom_tone or "").strip() or DEFAULT_TONE
    return tone or ""


def is_unsure(value: Any) -> bool:
    """True for the uncertainty sentinel or free text saying 'not sure'."""
    if value == NOT_SURE:
        return True
    return isinstance(value, str) and "not sure" in value.lower()


def has_unsure_fields(state: Mapping[str, Any]) -> bool:
    return any(is_unsure(state.get(name)) for name in UNSURE_CHECK_FIELDS)


def collect_form_data(fields: Mapping[str, Any], api_key: str = "") -> FormState:
    """
    Build a FormState from raw widget values.

    Strings are trimmed and HTML-escaped, booleans are kept as-is, the custom
    tone marker is resolved and the API key is attached separately.
    """
    data: FormState = {}
    for name, value in fields.items():
        if name == "apiKey":
            continue
        if isinstance(value, bool):
            data[name] = value
        elif isinstance(value, str):
            data[name] = TextUtils.escape_html(value.strip(), quote=False)
        elif value is None:
            data[name] = ""
        else:
            data[name] = value

    if data.get("tone") == CUSTOM_TONE_MARKER:
        custom = TextUtils.escape_html(str(fields.get("customTone") or "").strip(), quote=False)
        data["tone"] = normalize_tone(CUSTOM_TONE_MARKER, custom)

    data["apiKey"] = (api_key or "").strip()
    return data


def populate_form(data: Mapping[str, Any]) -> FormState:
    """
    Turn a stored snapshot into widget values.

    Missing inclusion flags take their defaults and a non-standard tone is
    shown as the ``custom`` option with the text in ``customTone``. Text is
    unescaped so a later collect does not escape it a second time.
    """
    widgets = apply_defaults(data)
    for name, value in widgets.items():
        if isinstance(value, str):
            widgets[name] = TextUtils.unescape_html(value)
    for flag in FLAG_DEFAULTS:
        widgets[flag] = bool(widgets[flag])

    tone = widgets.get("tone")
    if tone and not is_standard_tone(tone):
        widgets["tone"] = CUSTOM_TONE_MARKER
        widgets["customTone"] = tone
    else:
        widgets["tone"] = tone or DEFAULT_TONE
    return widgets


def blank_form() -> FormState:
    """Widget values after a start-over: empty text and default flags."""
    widgets: FormState = {name: "" for name in DESCRIPTIVE_FIELDS}
    widgets.update(FLAG_DEFAULTS)
    return widgets
