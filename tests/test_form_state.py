# tests/test_form_state.py

"""
Unit tests for form state helpers.
"""

import pytest

from readme_pro.form_state import (
    CUSTOM_TONE_MARKER,
    DEFAULT_TONE,
    FLAG_DEFAULTS,
    NOT_SURE,
    Draft,
    Template,
    ViewState,
    apply_defaults,
    blank_form,
    collect_form_data,
    has_unsure_fields,
    is_unsure,
    normalize_tone,
    populate_form,
    strip_secrets,
)


class TestSecretsAndDefaults:
    """Test cases for secret stripping and flag defaults."""

    def test_strip_secrets(self, sample_form):
        stripped = strip_secrets(sample_form)

        assert "apiKey" not in stripped
        assert "apiProvider" not in stripped
        assert "apiKey" in sample_form

    def test_apply_defaults_keeps_explicit_values(self):
        merged = apply_defaults({"includeInstall": False})

        assert merged["includeInstall"] is False
        assert merged["includeAPI"] is False
        assert merged["includeUsage"] is True

    def test_blank_form(self):
        widgets = blank_form()

        assert widgets["projectName"] == ""
        for flag, default in FLAG_DEFAULTS.items():
            assert widgets[flag] is default


class TestTone:
    """Test cases for tone handling."""

    def test_custom_tone_resolved(self):
        assert normalize_tone(CUSTOM_TONE_MARKER, "  witty and dry ") == "witty and dry"

    def test_blank_custom_tone_falls_back(self):
        assert normalize_tone(CUSTOM_TONE_MARKER, "   ") == DEFAULT_TONE

    def test_standard_tone_unchanged(self):
        assert normalize_tone("casual", "ignored") == "casual"

    def test_populate_maps_custom_tone(self):
        widgets = populate_form({"tone": "pirate speak"})

        assert widgets["tone"] == CUSTOM_TONE_MARKER
        assert widgets["customTone"] == "pirate speak"

    @pytest.mark.parametrize("tone, expected", [("technical", "technical"), ("", DEFAULT_TONE), (None, DEFAULT_TONE)])
    def test_populate_standard_or_missing_tone(self, tone, expected):
        assert populate_form({"tone": tone})["tone"] == expected


class TestCollect:
    """Test cases for collecting widget values."""

    def test_trims_and_escapes(self):
        data = collect_form_data({"projectName": "  <b>Tool</b> & co  ", "description": "x"})

        assert data["projectName"] == "&lt;b&gt;Tool&lt;/b&gt; &amp; co"

    def test_quotes_are_not_escaped(self):
        data = collect_form_data({"description": 'say "hi"'})
        assert data["description"] == 'say "hi"'

    def test_flags_and_none(self):
        data = collect_form_data({"includeAPI": True, "includeUsage": False, "demo": None})

        assert data["includeAPI"] is True
        assert data["includeUsage"] is False
        assert data["demo"] == ""

    def test_api_key_attached_separately(self):
        data = collect_form_data({"apiKey": "from-widgets"}, api_key="  sk-real  ")
        assert data["apiKey"] == "sk-real"

    def test_custom_tone_collected(self):
        data = collect_form_data({"tone": CUSTOM_TONE_MARKER, "customTone": " calm <3 "})
        assert data["tone"] == "calm &lt;3"

    def test_reload_does_not_escape_twice(self):
        first = collect_form_data({"projectName": "A & B", "tone": CUSTOM_TONE_MARKER, "customTone": "calm <3"})

        widgets = populate_form(first)
        second = collect_form_data(widgets)

        assert widgets["projectName"] == "A & B"
        assert widgets["customTone"] == "calm <3"
        assert second["projectName"] == "A &amp; B"
        assert second["tone"] == "calm &lt;3"

    def test_populate_flags_coerced(self):
        widgets = populate_form({"includeAPI": 1, "includeUsage": 0})

        assert widgets["includeAPI"] is True
        assert widgets["includeUsage"] is False


class TestUnsure:
    """Test cases for the uncertainty sentinel."""

    @pytest.mark.parametrize("value, expected", [
        (NOT_SURE, True),
        ("Not sure yet", True),
        ("I'm NOT SURE", True),
        ("python", False),
        ("", False),
        (None, False),
        (True, False),
    ])
    def test_is_unsure(self, value, expected):
        assert is_unsure(value) is expected

    def test_has_unsure_fields_only_checks_listed_fields(self):
        assert has_unsure_fields({"license": NOT_SURE}) is True
        assert has_unsure_fields({"projectName": "not sure"}) is False


class TestModels:
    """Test cases for the stored record types."""

    def test_draft_to_dict(self):
        assert Draft(2, {"a": 1}).to_dict() == {"step": 2, "formData": {"a": 1}}

    def test_template_from_dict(self):
        template = Template.from_dict({"name": "x", "data": {"projectName": "P"}})
        assert template == Template("x", {"projectName": "P"})

    def test_view_autosave_guard(self):
        assert ViewState.FORM.suppresses_autosave is False
        assert ViewState.LOADING.suppresses_autosave is True
        assert ViewState.RESULT.suppresses_autosave is True
        assert ViewState.AB_TEST.suppresses_autosave is True
