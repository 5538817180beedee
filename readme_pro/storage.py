# readme_pro/storage.py

"""
Persistence of drafts, templates and the remembered API key.

Values live in a durable string -> string key-value store. Everything except
the encrypted key itself is JSON-encoded, and the keys match the ones the
web app used in localStorage so existing data stays readable.
"""

import json
import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional

from .form_state import (
    Draft,
    FormState,
    RememberedCredential,
    Template,
    ViewState,
    apply_defaults,
    strip_secrets,
)
from .security import SecurityModule

logger = logging.getLogger(__name__)

DRAFT_KEY = "readmeGenerator_draft"
TEMPLATES_KEY = "readmeGeneratorTemplates"
API_PROVIDER_KEY = "apiProvider"
API_KEY_KEY = "apiKey"
REMEMBER_KEY = "rememberApiKey"
THEME_KEY = "theme"


class KeyValueStore:
    """Minimal localStorage-like interface."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Volatile store, used for tests and one-shot runs."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store persisted as one JSON object on disk, rewritten on every change."""

    def __init__(self, path: str = '.readme_pro_store.json'):
        """
        Initialize the file store.

        Args:
            path: Path to the JSON file
        """
        self.path = path
        self.data: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        """Load entries from file if it exists."""
        if not os.path.exists(self.path):
            logger.debug(f"Store file {self.path} not found, starting empty")
            return

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError("store root is not an object")
            self.data = {str(k): str(v) for k, v in raw.items()}
            logger.info(f"Loaded store with {len(self.data)} entries from {self.path}")
        except Exception as e:
            logger.warning(f"Failed to load store from {self.path}: {e}")
            self.data = {}

    def _save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self.data, f, indent=2, ensure_ascii=False)
        logger.debug(f"Saved store with {len(self.data)} entries to {self.path}")

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if key in self.data:
            del self.data[key]
            self._save()


class ReadmeStorage:
    """Drafts, named templates and the remember-me credential."""

    def __init__(self, store: KeyValueStore, security: Optional[SecurityModule] = None):
        self.store = store
        self.security = security or SecurityModule()

    def _write_snapshot(self, key: str, payload: Any) -> None:
        self.store.set(key, json.dumps(payload, ensure_ascii=False))

    # -------- Drafts --------
    def save_draft(self, current_step: int, form_state: Mapping[str, Any],
                   view: ViewState = ViewState.FORM) -> bool:
        """
        Store the in-progress form.

        Skipped while a result or loading view is active, since field reads
        from those views are incidental.

        Returns:
            True if the draft was written
        """
        if view.suppresses_autosave:
            logger.debug(f"Draft save skipped while view is {view.value}")
            return False

        draft = Draft(step=current_step, form_data=strip_secrets(form_state))
        self._write_snapshot(DRAFT_KEY, draft.to_dict())
        return True

    def load_draft(self) -> Optional[Draft]:
        """
        Read the stored draft.

        Accepts the current ``{step, formData}`` shape and the older flat
        shape. A corrupt entry is deleted and treated as absent.
        """
        raw = self.store.get(DRAFT_KEY)
        if not raw:
            return None

        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                raise ValueError("draft is not an object")
        except ValueError as e:
            logger.error(f"Could not load draft: {e}")
            self.store.remove(DRAFT_KEY)
            return None

        form_data = parsed.get("formData")
        step = parsed.get("step")
        if isinstance(form_data, dict) and isinstance(step, int) and not isinstance(step, bool):
            return Draft(step=step, form_data=apply_defaults(form_data))
        return Draft(step=1, form_data=apply_defaults(parsed))

    def clear_draft(self) -> None:
        self.store.remove(DRAFT_KEY)

    # -------- Remembered credential --------
    def remember_credential(self, provider: str, plaintext_key: str) -> None:
        """Encrypt and store the key together with its provider and the opt-in flag."""
        encrypted = self.security.encrypt(plaintext_key)
        self.store.set(API_PROVIDER_KEY, provider)
        self.store.set(API_KEY_KEY, encrypted)
        self.store.set(REMEMBER_KEY, "true")
        logger.info(f"Remembered API key for provider '{provider}'")

    def forget_credential(self) -> None:
        """Clear the provider, encrypted key and opt-in flag together."""
        for key in (API_PROVIDER_KEY, API_KEY_KEY, REMEMBER_KEY):
            self.store.remove(key)
        logger.info("Forgot remembered API key")

    def handle_credential_storage(self, remember: bool, provider: str, api_key: str) -> None:
        """Apply the user's remember-me choice at generation time."""
        api_key = (api_key or "").strip()
        if remember and api_key:
            self.remember_credential(provider, api_key)
        elif not remember:
            self.forget_credential()

    def load_credential(self) -> Optional[RememberedCredential]:
        """
        Restore the remembered credential.

        Returns:
            None when the user never opted in or the slots are incomplete;
            otherwise the credential, flagged ``restore_failed`` when the key
            could not be decrypted
        """
        if self.store.get(REMEMBER_KEY) != "true":
            return None

        provider = self.store.get(API_PROVIDER_KEY)
        encrypted = self.store.get(API_KEY_KEY)
        if not provider or not encrypted:
            return None

        key = self.security.decrypt(encrypted)
        if not key:
            logger.warning("Remembered API key could not be decrypted")
            return RememberedCredential(provider=provider, key="", restore_failed=True)
        return RememberedCredential(provider=provider, key=key)

    # -------- Templates --------
    def _read_templates(self) -> List[Template]:
        raw = self.store.get(TEMPLATES_KEY)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, list):
                raise ValueError("templates entry is not a list")
            return [Template.from_dict(item) for item in parsed]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring corrupt templates entry: {e}")
            return []

    def _write_templates(self, templates: List[Template]) -> None:
        templates.sort(key=lambda t: t.name)
        self._write_snapshot(TEMPLATES_KEY, [t.to_dict() for t in templates])

    def list_templates(self) -> List[Template]:
        """All templates ordered by name; empty when the stored list is corrupt."""
        return sorted(self._read_templates(), key=lambda t: t.name)

    def name_exists(self, name: str) -> bool:
        return any(t.name == name for t in self._read_templates())

    def get_template(self, name: str) -> Optional[Template]:
        for template in self._read_templates():
            if template.name == name:
                return Template(name=template.name, data=apply_defaults(template.data))
        return None

    def upsert_template(self, name: str, form_state: Mapping[str, Any]) -> Template:
        """Insert or replace a template by name. Callers gate overwrites."""
        new_template = Template(name=name, data=strip_secrets(form_state))
        templates = self._read_templates()
        for index, existing in enumerate(templates):
            if existing.name == name:
                templates[index] = new_template
                break
        else:
            templates.append(new_template)
        self._write_templates(templates)
        logger.info(f"Saved template '{name}'")
        return new_template

    def save_template(self, name: str, form_state: Mapping[str, Any],
                      confirm_overwrite: Optional[Callable[[str], bool]] = None) -> bool:
        """
        Save a template, asking before replacing an existing one.

        Args:
            name: Template name
            form_state: Snapshot to save
            confirm_overwrite: Called with the name on collision; None declines

        Returns:
            True if the template was written
        """
        name = (name or "").strip()
        if not name:
            return False
        if self.name_exists(name):
            if confirm_overwrite is None or not confirm_overwrite(name):
                logger.info(f"Template '{name}' exists, overwrite declined")
                return False
        self.upsert_template(name, form_state)
        return True

    def delete_template(self, name: str) -> bool:
        templates = self._read_templates()
        remaining = [t for t in templates if t.name != name]
        if len(remaining) == len(templates):
            return False
        self._write_templates(remaining)
        logger.info(f"Deleted template '{name}'")
        return True

    # -------- Preferences --------
    def get_theme(self) -> Optional[str]:
        return self.store.get(THEME_KEY)

    def set_theme(self, theme: str) -> None:
        self.store.set(THEME_KEY, theme)
