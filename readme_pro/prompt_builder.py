# readme_pro/prompt_builder.py

"""
Prompt assembly for README generation.

Pure functions: the same form data and provider always give the same prompt,
byte for byte. Nothing here talks to the network.
"""

from __future__ import annotations
from typing import Any, Mapping, Optional

from .form_state import NOT_SURE, has_unsure_fields

DEFAULT_HEADER = "Create a comprehensive, professional README.md file for the following project:"
EXPERT_HEADER = (
    "As an expert technical writer specializing in developer documentation, "
    "create a comprehensive, professional README.md file for the following project:"
)

# Providers that respond better to an explicit role
EXPERT_PHRASING_PROVIDERS = ("openai",)

SMART_FILLING_BLOCK = """
SMART FILLING REQUIRED: The user has indicated uncertainty about some fields or left them blank. Please intelligently fill in missing information based on the project description and available context:

1. If project type is "not-sure" - analyze the description and file structure to determine the most likely project type (e.g., presence of 'src/main.js' and 'public/index.html' suggests a web app).
2. If language is "not-sure" - infer from frameworks, dependencies, or project description
3. If frameworks/dependencies contain "not sure" - suggest appropriate ones based on the project type and language
4. If features contain "not sure" - generate logical features based on the project description and type
5. If installation contains "not sure" - create standard installation instructions for the determined tech stack
6. If usage contains "not sure" - generate appropriate usage examples for the project type
7. If requirements contains "not sure" - list standard requirements for the tech stack
8. If license is "not-sure" - recommend MIT for open source projects or Apache 2.0 for larger projects
9. For any empty optional fields - generate reasonable content if it would improve the README

Be creative and logical in your assumptions, ensuring all generated content is realistic and appropriate for the project type and description provided.
"""

PRO_FOOTER = "<sub>*This README was generated with ❤️ by Interactive README Pro*</sub>"
BASIC_FOOTER = (
    "<sub>*This README was generated with the free version of Interactive README Pro. "
    "Upgrade to Pro for a more detailed and accurate README based on deep repository analysis!*</sub>"
)


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return str(value)


def _is_known(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    return bool(value) and value != NOT_SURE


def instructions_header(provider: Optional[str]) -> str:
    """Opening instruction tailored to the provider."""
    if provider in EXPERT_PHRASING_PROVIDERS:
        return EXPERT_HEADER
    return DEFAULT_HEADER


def create_prompt(form_state: Mapping[str, Any], provider: Optional[str] = None) -> str:
    """
    Build the generation request for the wizard flow.

    Args:
        form_state: Collected form data
        provider: AI provider id; defaults to the form's ``apiProvider``

    Returns:
        The prompt string
    """
    data = form_state
    provider = provider or data.get("apiProvider")
    unsure = has_unsure_fields(data)

    file_structure = ""
    if data.get("fileStructure"):
        file_structure = f"\nFile Structure Summary:\n{_text(data, 'fileStructure')}"

    sections = "\n".join([
        "- Installation instructions" if data.get("includeInstall") else "",
        "- Usage examples with code blocks" if data.get("includeUsage") else "",
        "- API documentation" if data.get("includeAPI") else "",
        "- Contributing guidelines" if data.get("includeContrib") else "",
    ])

    return f"""{instructions_header(provider)}

Project Name: {_text(data, 'projectName')}
Description: {_text(data, 'description')}
{file_structure}
Project Type: {_text(data, 'projectType')}
Primary Language: {_text(data, 'mainLanguage')}
Frameworks/Technologies: {_text(data, 'frameworks')}
Dependencies: {_text(data, 'dependencies')}
Features: {_text(data, 'features')}
Demo/Screenshots: {_text(data, 'demo')}
Installation: {_text(data, 'installation')}
Usage: {_text(data, 'usage')}
Requirements: {_text(data, 'requirements')}
License: {_text(data, 'license')}
Author: {_text(data, 'author')}
Contact: {_text(data, 'contact')}
Acknowledgments: {_text(data, 'acknowledgments')}

Include sections for:
{sections}

IMPORTANT INSTRUCTIONS FOR HANDLING MISSING/UNCERTAIN INFORMATION:
{SMART_FILLING_BLOCK if unsure else ''}

Requirements:
1. **Tone of Voice**: Write the entire document in a **{_text(data, 'tone')}** tone. If the tone is "ai-decide", choose a tone that best fits the project's description and type (e.g., professional for a library, friendly for a consumer app).
2. **Markdown Style**:
   - Use a hyphen (-) for all unordered list items (MD004).
   - Ensure there is only a single blank line between elements (no multiple blank lines) (MD012).
3. Use proper Markdown formatting with headers, code blocks, lists, and badges.
4. Include a table of contents if the README is substantial.
5. Add relevant badges/shields (build status, version, license, etc.).
6. Make it professional and comprehensive.
7. Include proper code examples with language-specific syntax highlighting (e.g., ```javascript).
8. Add sections for troubleshooting if relevant.
9. Include links where appropriate.
10. Make it visually appealing with emojis and proper formatting.
11. Ensure all sections flow logically and provide value.
{'12. Fill in all uncertain or missing information intelligently based on context.' if unsure else ''}

Generate only the README content in valid Markdown format, nothing else."""


def create_repo_prompt(metadata: Mapping[str, Any], is_pro: bool = True) -> str:
    """
    Build the generation request for the repository-analysis flow.

    Args:
        metadata: FormState-shaped data produced by the GitHub analyzer
        is_pro: False gives the basic prompt built from repository info only

    Returns:
        The prompt string
    """
    data = metadata
    if not is_pro:
        return f"""Create a good-looking, professional README.md file for the following project.
The analysis was basic. You only have the following information:

Project Name: {_text(data, 'projectName')}
Description: {_text(data, 'description')}
Primary Language: {_text(data, 'mainLanguage')}
Author: {_text(data, 'author')}

Based on this, please generate a standard, high-quality README. Include sections like Installation, Usage, and Contributing, but make the content generic and based on best practices for a project of this language.

At the very end of the file, add the following footer exactly as written, including the horizontal rule:
---
{BASIC_FOOTER}"""

    file_structure = f"File Structure Summary:\n{_text(data, 'fileStructure')}\n" if _is_known(data, "fileStructure") else ""
    scripts = f"Available Scripts: {_text(data, 'scripts')}\n" if _is_known(data, "scripts") else ""
    entry_point = f"Main Entry Point: {_text(data, 'mainEntryPoint')}\n" if _is_known(data, "mainEntryPoint") else ""

    return f"""{DEFAULT_HEADER}

Project Name: {_text(data, 'projectName')}
Description: {_text(data, 'description')}
{file_structure}
{scripts}
{entry_point}
Project Type: {_text(data, 'projectType')}
Primary Language: {_text(data, 'mainLanguage')}
Frameworks/Technologies: {_text(data, 'frameworks')}
Dependencies: {_text(data, 'dependencies')}
Features: {_text(data, 'features')}
License: {_text(data, 'license')}
Author: {_text(data, 'author')}

IMPORTANT INSTRUCTIONS:
The user has provided the above information by analyzing a GitHub repository. Some fields are marked 'not-sure'. Please intelligently fill in all missing or uncertain information based on the project details and file structure provided. For example, infer the project type from the file structure, suggest features, and generate standard installation/usage instructions appropriate for the detected language and frameworks.

Requirements:
1. Tone of Voice: Write the entire document in a professional tone.
2. Use proper Markdown formatting with headers, code blocks, lists, and badges.
3. Include a table of contents.
4. Add relevant badges (build status, version, license).
5. Make it professional, comprehensive, and visually appealing with emojis.

Generate only the README content in valid Markdown format.

At the very end of the file, add the following footer exactly as written, including the horizontal rule:
---
{PRO_FOOTER}"""
