# tests/test_prompt_builder.py

"""
Unit tests for prompt assembly.
"""

import pytest

from readme_pro.form_state import NOT_SURE
from readme_pro.prompt_builder import (
    BASIC_FOOTER,
    DEFAULT_HEADER,
    EXPERT_HEADER,
    PRO_FOOTER,
    SMART_FILLING_BLOCK,
    create_prompt,
    create_repo_prompt,
    instructions_header,
)


class TestCreatePrompt:
    """Test cases for the wizard prompt."""

    def test_deterministic(self, sample_form):
        assert create_prompt(sample_form) == create_prompt(dict(sample_form))

    def test_provider_headers(self, sample_form):
        assert create_prompt(sample_form, "openai").startswith(EXPERT_HEADER + "\n\n")
        assert create_prompt(sample_form, "gemini").startswith(DEFAULT_HEADER + "\n\n")

    def test_provider_defaults_to_form_value(self, sample_form):
        gemini_form = dict(sample_form, apiProvider="gemini")
        assert create_prompt(gemini_form) == create_prompt(sample_form, "gemini")

    def test_unknown_provider_uses_default_header(self):
        assert instructions_header(None) == DEFAULT_HEADER
        assert instructions_header("other") == DEFAULT_HEADER

    def test_field_lines(self, sample_form):
        prompt = create_prompt(sample_form)

        assert "\nProject Name: Demo Project\n" in prompt
        assert "\nPrimary Language: python\n" in prompt
        assert "\nLicense: MIT\n" in prompt
        assert "Write the entire document in a **friendly** tone." in prompt
        assert prompt.endswith("Generate only the README content in valid Markdown format, nothing else.")

    def test_missing_fields_render_empty(self):
        prompt = create_prompt({"projectName": "Only"}, "gemini")

        assert "\nDescription: \n" in prompt
        assert "\nAcknowledgments: \n" in prompt
        assert "None" not in prompt

    def test_sections_follow_flags(self, sample_form):
        prompt = create_prompt(sample_form)

        assert (
            "Include sections for:\n"
            "- Installation instructions\n"
            "- Usage examples with code blocks\n"
            "\n"
            "- Contributing guidelines\n"
        ) in prompt

    def test_api_section_when_requested(self, sample_form):
        prompt = create_prompt(dict(sample_form, includeAPI=True, includeContrib=False))

        assert "- API documentation\n\n" in prompt
        assert "- Contributing guidelines" not in prompt

    def test_file_structure_block(self, sample_form):
        prompt = create_prompt(dict(sample_form, fileStructure="src/main.py\nREADME.md"))
        assert "\nFile Structure Summary:\nsrc/main.py\nREADME.md\nProject Type: cli" in prompt

    def test_no_file_structure_block_when_empty(self, sample_form):
        prompt = create_prompt(sample_form)

        assert "File Structure Summary" not in prompt
        assert "\n\nProject Type: cli" in prompt

    def test_confident_form_omits_smart_filling(self, sample_form):
        prompt = create_prompt(sample_form)

        assert "SMART FILLING REQUIRED" not in prompt
        assert "12. Fill in all uncertain" not in prompt
        assert "IMPORTANT INSTRUCTIONS FOR HANDLING MISSING/UNCERTAIN INFORMATION:\n\n\nRequirements:" in prompt

    @pytest.mark.parametrize("field, value", [
        ("projectType", NOT_SURE),
        ("license", NOT_SURE),
        ("frameworks", "Not sure, maybe Flask"),
        ("usage", "not sure"),
    ])
    def test_unsure_form_adds_smart_filling(self, sample_form, field, value):
        prompt = create_prompt(dict(sample_form, **{field: value}))

        assert SMART_FILLING_BLOCK in prompt
        assert "\n12. Fill in all uncertain or missing information intelligently based on context.\n" in prompt

    def test_unsure_in_unchecked_field_is_ignored(self, sample_form):
        prompt = create_prompt(dict(sample_form, author="not sure"))
        assert "SMART FILLING REQUIRED" not in prompt


class TestCreateRepoPrompt:
    """Test cases for the repository prompt."""

    @pytest.fixture
    def metadata(self):
        return {
            "projectName": "widget",
            "description": "Widgets for everyone",
            "mainLanguage": "javascript",
            "author": "octocat",
            "license": "MIT",
            "projectType": "web-app",
            "fileStructure": "index.js\npackage.json",
            "scripts": "start, test",
            "mainEntryPoint": "index.js",
            "frameworks": "react",
            "dependencies": "react, express",
            "features": NOT_SURE,
        }

    def test_pro_prompt(self, metadata):
        prompt = create_repo_prompt(metadata)

        assert prompt.startswith(DEFAULT_HEADER)
        assert "File Structure Summary:\nindex.js\npackage.json\n" in prompt
        assert "Available Scripts: start, test\n" in prompt
        assert "Main Entry Point: index.js\n" in prompt
        assert "Features: not-sure\n" in prompt
        assert prompt.endswith("---\n" + PRO_FOOTER)

    def test_pro_prompt_omits_unknown_lines(self, metadata):
        metadata.update(fileStructure=NOT_SURE, scripts=NOT_SURE, mainEntryPoint=NOT_SURE)

        prompt = create_repo_prompt(metadata)

        assert "File Structure Summary" not in prompt
        assert "Available Scripts" not in prompt
        assert "Main Entry Point" not in prompt

    def test_basic_prompt(self, metadata):
        prompt = create_repo_prompt(metadata, is_pro=False)

        assert "The analysis was basic." in prompt
        assert "Primary Language: javascript\n" in prompt
        assert "Author: octocat\n" in prompt
        assert "Dependencies" not in prompt
        assert prompt.endswith("---\n" + BASIC_FOOTER)
