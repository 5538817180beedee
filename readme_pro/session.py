# readme_pro/session.py

"""
Wizard session: the state and control flow of one README wizard.

The session owns the current step, the active view and the widget values,
and wires them to the persistence layer, the share codec, prompt assembly
and the AI client. Form data is passed explicitly to each of those; the
session is the only place that holds it between calls.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

from .exceptions import AIProviderError, CorruptShareLinkError, GenerationInProgressError, ReadmeProError
from .form_state import (
    CUSTOM_TONE_MARKER,
    TOTAL_STEPS,
    FormState,
    ViewState,
    blank_form,
    collect_form_data,
    populate_form,
    strip_secrets,
)
from .prompt_builder import create_prompt
from .providers.ai_client import AIClient, get_api_error_message
from .share_codec import build_share_url, consume_share_url
from .storage import ReadmeStorage
from .utils.debounce import Debouncer
from .utils.text_utils import TextUtils
from .validator import ValidationResult, validate_step

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "openai"
ALTERNATE_PROVIDERS = {"openai": "gemini", "gemini": "openai"}

DRAFT_LOADED_MESSAGE = "Your previous unsaved draft has been loaded."
SHARED_LOADED_MESSAGE = "Shared project data has been loaded. Please provide your API key to proceed."
KEY_RESTORE_FAILED_MESSAGE = "Could not restore your saved API key. Please enter it again."
MISSING_KEY_MESSAGE = "API Key is missing. Please return to Step 1 to enter it."
BLANK_CUSTOM_TONE_MESSAGE = "Please enter a custom tone before regenerating."


class WizardSession:
    """One user's pass through the wizard."""

    def __init__(
        self,
        storage: ReadmeStorage,
        ai_client: Optional[AIClient] = None,
        *,
        autosave_delay: float = 0.5,
        share_base_url: str = "",
    ):
        self.storage = storage
        self.ai_client = ai_client or AIClient()
        self.share_base_url = share_base_url

        self.current_step = 1
        self.view = ViewState.FORM
        self.fields: FormState = blank_form()
        self.provider = DEFAULT_PROVIDER
        self.api_key = ""
        self.remember_key = False

        self.generated_readme = ""
        self.last_form_data: Optional[FormState] = None
        self.messages: List[str] = []
        self.last_error: Optional[str] = None

        self.autosave = Debouncer(
            self.save_draft_now,
            delay=autosave_delay,
            is_suppressed=lambda: self.view.suppresses_autosave,
        )

    # -------- Startup --------
    def start(self, url: Optional[str] = None) -> Optional[str]:
        """
        Restore state at startup: draft, remembered key, then a shared link.

        Args:
            url: The URL the wizard was opened with, if any

        Returns:
            The URL with any share fragment removed
        """
        draft = self.storage.load_draft()
        if draft is not None:
            self.load_snapshot(draft.form_data)
            self.current_step = min(max(draft.step, 1), TOTAL_STEPS)
            self._info(DRAFT_LOADED_MESSAGE)

        self.restore_credential()

        if url:
            return self.import_share_url(url)
        return url

    def restore_credential(self) -> None:
        credential = self.storage.load_credential()
        if credential is None:
            return
        self.provider = credential.provider
        self.api_key = credential.key
        self.remember_key = True
        if credential.restore_failed:
            self._error(KEY_RESTORE_FAILED_MESSAGE)

    # -------- Form editing --------
    def load_snapshot(self, data: FormState) -> None:
        """Populate widgets from a stored or shared snapshot."""
        widgets = blank_form()
        widgets.update(populate_form(strip_secrets(data)))
        self.fields = widgets

    def edit(self, **changes: Any) -> None:
        """Apply widget changes and schedule an autosave."""
        self.fields.update(changes)
        self.autosave.trigger()

    def collect(self) -> FormState:
        """Current form data, including the secret fields."""
        fields = dict(self.fields)
        fields["apiProvider"] = self.provider
        return collect_form_data(fields, api_key=self.api_key)

    def save_draft_now(self) -> bool:
        return self.storage.save_draft(self.current_step, self.collect(), view=self.view)

    # -------- Navigation --------
    def validate_current_step(self) -> ValidationResult:
        fields = dict(self.fields)
        fields["apiProvider"] = self.provider
        fields["apiKey"] = self.api_key
        result = validate_step(self.current_step, fields)
        if not result.passed:
            self._error(result.message)
        return result

    def next_step(self) -> bool:
        if not self.validate_current_step().passed:
            return False
        if self.current_step < TOTAL_STEPS:
            self.current_step += 1
        return True

    def previous_step(self) -> None:
        if self.current_step > 1:
            self.current_step -= 1

    # -------- Generation --------
    def generate(self) -> Optional[str]:
        """
        Generate the README from the current form.

        Returns:
            The README Markdown, or None when no API key is set

        Raises:
            GenerationInProgressError: If a generation is already running
            AIProviderError: If the provider call fails; ``last_error`` holds the user-facing message
        """
        if self.view is ViewState.LOADING:
            raise GenerationInProgressError("A README is already being generated.")

        if not self.api_key.strip():
            self._error(MISSING_KEY_MESSAGE)
            self.current_step = 1
            return None

        self.storage.handle_credential_storage(self.remember_key, self.provider, self.api_key)

        data = self.collect()
        self.last_form_data = data
        self.autosave.cancel()
        self.view = ViewState.LOADING

        try:
            prompt = create_prompt(data, self.provider)
            readme = self.ai_client.generate(prompt, self.provider, self.api_key)
        except AIProviderError as e:
            self._error(get_api_error_message(e, self.provider))
            self.view = ViewState.FORM
            raise
        except Exception:
            self.view = ViewState.FORM
            raise

        self.generated_readme = readme
        self.view = ViewState.RESULT
        self.storage.clear_draft()
        logger.info("README generated")
        return readme

    def change_tone_and_regenerate(self, tone: str, custom_tone: str = "") -> Optional[str]:
        """
        Regenerate the last README with a different tone.

        Args:
            tone: A standard tone or the ``custom`` marker
            custom_tone: The user's own tone text when ``tone`` is ``custom``

        Returns:
            The new README, or None when nothing was generated yet or the
            custom tone is blank

        Raises:
            GenerationInProgressError: If a generation is already running
            AIProviderError: If the provider call fails; the previous README is kept
        """
        if self.last_form_data is None:
            return None
        if self.view is ViewState.LOADING:
            raise GenerationInProgressError("A README is already being generated.")

        if tone == CUSTOM_TONE_MARKER:
            tone = TextUtils.escape_html((custom_tone or "").strip(), quote=False)
            if not tone:
                self._error(BLANK_CUSTOM_TONE_MESSAGE)
                return None
        self.last_form_data["tone"] = tone

        provider = self.last_form_data.get("apiProvider") or self.provider
        previous_view = self.view
        self.view = ViewState.LOADING
        try:
            prompt = create_prompt(self.last_form_data, provider)
            readme = self.ai_client.generate(prompt, provider, self.last_form_data.get("apiKey", ""))
        except AIProviderError as e:
            self._error(get_api_error_message(e, provider))
            self.view = previous_view
            raise
        except Exception:
            self.view = previous_view
            raise

        self.generated_readme = readme
        self.view = ViewState.RESULT
        logger.info(f"README regenerated with tone {tone!r}")
        return readme

    def run_ab_test(self) -> Tuple[str, str]:
        """
        Generate the same README with the other provider for comparison.

        Returns:
            (original README, alternate README)
        """
        if self.last_form_data is None or not self.generated_readme:
            raise ReadmeProError("Generate a README before comparing providers.")

        alternate = ALTERNATE_PROVIDERS.get(self.provider, DEFAULT_PROVIDER)
        alternate_data = dict(self.last_form_data)
        alternate_data["apiProvider"] = alternate
        prompt = create_prompt(alternate_data, alternate)
        try:
            alternate_readme = self.ai_client.generate(prompt, alternate, self.last_form_data.get("apiKey", ""))
        except AIProviderError as e:
            self._error(get_api_error_message(e, alternate))
            raise

        self.view = ViewState.AB_TEST
        return self.generated_readme, alternate_readme

    def start_over(self) -> None:
        """Reset the wizard, drop the draft and restore only the remembered key."""
        self.autosave.cancel()
        self.current_step = 1
        self.generated_readme = ""
        self.last_form_data = None
        self.storage.clear_draft()
        self.fields = blank_form()
        self.api_key = ""
        self.remember_key = False
        self.view = ViewState.FORM
        self.last_error = None
        self.restore_credential()

    # -------- Templates --------
    def save_template(self, name: str, confirm_overwrite: Optional[Callable[[str], bool]] = None) -> bool:
        """Save the last generated form as a template."""
        if self.last_form_data is None:
            return False
        return self.storage.save_template(name, self.last_form_data, confirm_overwrite)

    def load_template(self, name: str) -> bool:
        template = self.storage.get_template(name)
        if template is None:
            return False
        self.load_snapshot(template.data)
        self._info(f'Template "{name}" loaded successfully.')
        return True

    def delete_template(self, name: str) -> bool:
        return self.storage.delete_template(name)

    # -------- Sharing --------
    def share_link(self) -> Optional[str]:
        """Share URL for the last generated form, if there is one."""
        if self.last_form_data is None:
            return None
        return build_share_url(self.share_base_url, self.last_form_data)

    def import_share_url(self, url: str) -> str:
        """
        Import a snapshot from a share URL.

        On a corrupt token the form is left untouched and the URL is
        returned unchanged.
        """
        try:
            data, cleaned_url = consume_share_url(url)
        except CorruptShareLinkError as e:
            self._error(str(e))
            return url
        if data is None:
            return url

        self.load_snapshot(data)
        self.current_step = 1
        self._info(SHARED_LOADED_MESSAGE)
        return cleaned_url

    # -------- Messages --------
    def _info(self, message: str) -> None:
        logger.info(message)
        self.messages.append(message)

    def _error(self, message: Optional[str]) -> None:
        if not message:
            return
        logger.warning(message)
        self.last_error = message
        self.messages.append(message)
