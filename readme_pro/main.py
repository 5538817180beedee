# readme_pro/main.py

"""
Command-line entry point for README Pro.
Commands:
  repo       Analyze a GitHub repository and generate its README
  generate   Generate a README from a form file (YAML or JSON)
  share      Print a share link for a form file
  import     Decode a share link back into form data
  templates  List, show, save or delete templates
  draft      Show or clear the autosaved draft
"""

import argparse
import json
import os
import sys
import logging
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from tqdm import tqdm

from .config_loader import ConfigLoader
from .exceptions import AIProviderError, ReadmeProError
from .form_state import FormState
from .prompt_builder import create_repo_prompt
from .providers.ai_client import AIClient, AIConfig, get_api_error_message
from .providers.github_client import GitHubAnalyzer, parse_repo_url
from .security import BrowserAmbientSecret, SecurityModule
from .session import WizardSession
from .share_codec import build_share_url, consume_share_url
from .storage import JsonFileStore, ReadmeStorage
from .utils.html_renderer import HTMLRenderer
from .utils.text_utils import TextUtils

logger = logging.getLogger(__name__)

API_KEY_ENV = {"openai": "OPENAI_API_KEY", "gemini": "GEMINI_API_KEY"}


def setup_logging(config: ConfigLoader):
    log_level = getattr(logging, config.get_log_level().upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format=config.get_log_format(),
        handlers=[logging.FileHandler(config.get_log_file(), encoding="utf-8"), logging.StreamHandler(sys.stderr)],
    )
    logger.info("Logging initialized")


def build_storage(config: ConfigLoader) -> ReadmeStorage:
    security = SecurityModule(
        BrowserAmbientSecret(config.get_user_agent(), config.get_origin()),
        iterations=config.get_pbkdf2_iterations(),
    )
    return ReadmeStorage(JsonFileStore(config.get_store_file()), security)


def build_ai_client(config: ConfigLoader) -> AIClient:
    return AIClient(
        AIConfig(
            openai_model=config.get("ai.openai_model", "gpt-3.5-turbo"),
            gemini_model=config.get("ai.gemini_model", "gemini-1.5-flash-latest"),
            timeout_seconds=config.get_ai_timeout(),
        )
    )


def read_form_file(path: str) -> FormState:
    """Load form data from a YAML or JSON file (JSON is valid YAML)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ReadmeProError(f"Could not read form file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ReadmeProError(f"Form file {path} must contain a mapping of field names to values")
    return data


def resolve_api_key(provider: str, explicit: Optional[str]) -> str:
    return explicit or os.getenv(API_KEY_ENV.get(provider, ""), "") or ""


def write_readme(readme: str, out_path: str, html: bool) -> None:
    content = TextUtils.ensure_newline_ending(TextUtils.strip_markdown_fences(readme))
    os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(content)
    print(f"✓ Successfully saved to {os.path.abspath(out_path)}")
    if html:
        html_path = os.path.splitext(out_path)[0] + ".html"
        HTMLRenderer.export_readme(content, html_path)
        print(f"✓ HTML export: {os.path.abspath(html_path)}")


# -------- Commands --------
def cmd_repo(args, config: ConfigLoader) -> int:
    provider = args.provider or config.get_provider()
    api_key = resolve_api_key(provider, args.key)
    if not api_key:
        print(f"Error: an API key is required (--key or {API_KEY_ENV.get(provider, 'API key env var')})")
        return 2

    owner, repo = parse_repo_url(args.repo)
    analyzer = GitHubAnalyzer(config.get_github_api_base(), config.get_github_timeout())
    client = build_ai_client(config)

    print(f"Starting README generation for {args.repo}...")
    with tqdm(total=3, desc="Analyzing repository") as pbar:
        metadata = analyzer.analyze(owner, repo, args.token or os.getenv("GITHUB_TOKEN"), is_pro=not args.basic)
        pbar.update(1)

        pbar.set_description(f"Generating README with {provider}")
        prompt = create_repo_prompt(metadata, is_pro=not args.basic)
        readme = client.generate(prompt, provider, api_key)
        pbar.update(1)

        pbar.set_description("Saving README")
        write_readme(readme, args.out or config.get_output_file(), args.html or config.is_html_export())
        pbar.update(1)
    return 0


def cmd_generate(args, config: ConfigLoader) -> int:
    storage = build_storage(config)
    session = WizardSession(storage, build_ai_client(config), autosave_delay=config.get_autosave_delay(),
                            share_base_url=config.get_share_base_url())
    session.start()

    form = read_form_file(args.form)
    session.load_snapshot(form)
    remembered_provider = session.provider if session.remember_key else None
    session.provider = args.provider or form.get("apiProvider") or remembered_provider or config.get_provider()
    session.api_key = resolve_api_key(session.provider, args.key or form.get("apiKey")) or session.api_key
    session.remember_key = args.remember or session.remember_key
    if args.forget:
        session.remember_key = False
    # Kept until generation succeeds so an interrupted run can be resumed
    session.save_draft_now()

    with tqdm(total=2, desc=f"Generating README with {session.provider}") as pbar:
        readme = session.generate()
        pbar.update(1)
        if readme is None:
            print(f"Error: {session.last_error}")
            return 2
        pbar.set_description("Saving README")
        write_readme(readme, args.out or config.get_output_file(), args.html or config.is_html_export())
        pbar.update(1)

    if args.save_template:
        saved = session.save_template(args.save_template, confirm_overwrite=lambda name: args.force)
        if not saved:
            print(f'Template "{args.save_template}" already exists; use --force to overwrite')
        else:
            print(f'✓ Saved template "{args.save_template}"')

    if args.share:
        print(session.share_link())
    return 0


def cmd_share(args, config: ConfigLoader) -> int:
    form = read_form_file(args.form)
    print(build_share_url(args.base_url or config.get_share_base_url(), form))
    return 0


def cmd_import(args, config: ConfigLoader) -> int:
    data, cleaned_url = consume_share_url(args.url)
    if data is None:
        print(f"Error: {args.url} does not contain a share link")
        return 2
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        print(f"✓ Form data written to {os.path.abspath(args.out)}")
    else:
        print(text)
    logger.info(f"Imported share link for {cleaned_url}")
    return 0


def cmd_templates(args, config: ConfigLoader) -> int:
    storage = build_storage(config)

    if args.action == "list":
        templates = storage.list_templates()
        if not templates:
            print("-- No templates saved --")
        for template in templates:
            print(template.name)
        return 0

    if not args.name:
        print("Error: a template name is required")
        return 2

    if args.action == "show":
        template = storage.get_template(args.name)
        if template is None:
            print(f'Error: no template named "{args.name}"')
            return 1
        print(json.dumps(template.data, indent=2, ensure_ascii=False))
    elif args.action == "save":
        if not args.form:
            print("Error: --form is required to save a template")
            return 2
        form = read_form_file(args.form)
        if not storage.save_template(args.name, form, confirm_overwrite=lambda name: args.force):
            print(f'Template "{args.name}" already exists; use --force to overwrite')
            return 1
        print(f'✓ Saved template "{args.name}"')
    elif args.action == "delete":
        if not storage.delete_template(args.name):
            print(f'Error: no template named "{args.name}"')
            return 1
        print(f'✓ Deleted template "{args.name}"')
    return 0


def cmd_draft(args, config: ConfigLoader) -> int:
    storage = build_storage(config)
    if args.action == "clear":
        storage.clear_draft()
        print("✓ Draft cleared")
        return 0

    draft = storage.load_draft()
    if draft is None:
        print("-- No draft saved --")
        return 0
    print(json.dumps(draft.to_dict(), indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="readme-pro", description="Generate README files with AI.")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("repo", help="Generate a README from a GitHub repository")
    p.add_argument("--repo", required=True, help="Full GitHub repository URL")
    p.add_argument("--key", help="AI provider API key")
    p.add_argument("--provider", choices=["openai", "gemini"], help="AI provider")
    p.add_argument("--out", help="Output file path")
    p.add_argument("--token", help="GitHub personal access token for private repos")
    p.add_argument("--basic", action="store_true", help="Use repository info only")
    p.add_argument("--html", action="store_true", help="Also write an HTML copy")
    p.set_defaults(func=cmd_repo)

    p = sub.add_parser("generate", help="Generate a README from a form file")
    p.add_argument("--form", required=True, help="YAML or JSON file with form fields")
    p.add_argument("--key", help="AI provider API key")
    p.add_argument("--provider", choices=["openai", "gemini"], help="AI provider")
    p.add_argument("--out", help="Output file path")
    p.add_argument("--remember", action="store_true", help="Remember the API key (encrypted)")
    p.add_argument("--forget", action="store_true", help="Forget any remembered API key")
    p.add_argument("--save-template", help="Save the form as a template under this name")
    p.add_argument("--force", action="store_true", help="Overwrite an existing template")
    p.add_argument("--share", action="store_true", help="Print a share link for the form")
    p.add_argument("--html", action="store_true", help="Also write an HTML copy")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("share", help="Print a share link for a form file")
    p.add_argument("--form", required=True, help="YAML or JSON file with form fields")
    p.add_argument("--base-url", help="Base URL of the share link")
    p.set_defaults(func=cmd_share)

    p = sub.add_parser("import", help="Decode a share link into form data")
    p.add_argument("url", help="Share link")
    p.add_argument("--out", help="Write the form data to this file")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("templates", help="Manage saved templates")
    p.add_argument("action", choices=["list", "show", "save", "delete"])
    p.add_argument("name", nargs="?")
    p.add_argument("--form", help="Form file for 'save'")
    p.add_argument("--force", action="store_true", help="Overwrite an existing template")
    p.set_defaults(func=cmd_templates)

    p = sub.add_parser("draft", help="Show or clear the autosaved draft")
    p.add_argument("action", choices=["show", "clear"])
    p.set_defaults(func=cmd_draft)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = ConfigLoader(args.config)
    setup_logging(config)
    logger.info(f"Running command: {args.command}")

    provider = getattr(args, "provider", None) or config.get_provider()
    try:
        return args.func(args, config)
    except AIProviderError as e:
        print(f"\nError: {get_api_error_message(e, provider)}")
        logger.exception("AI provider request failed")
        return 1
    except ReadmeProError as e:
        print(f"\nError: {e}")
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user")
        logger.info("Operation cancelled by user")
        sys.exit(130)
