# tests/test_main.py

"""
Command-line tests. AI calls are patched out; storage and output live in tmp_path.
"""

import json

import pytest
import yaml

from readme_pro.exceptions import AIProviderError
from readme_pro.main import main
from readme_pro.providers.ai_client import AIClient

OPENAI_KEY = "sk-" + "c" * 45


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Config pointing store, log and output into tmp_path."""
    for name in ("README_PRO_PROVIDER", "OPENAI_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    config = {
        "storage": {"file": str(tmp_path / "store.json")},
        "logging": {"file": str(tmp_path / "readme_pro.log")},
        "output": {"file": str(tmp_path / "README.md")},
        "share": {"base_url": "https://readme.example/"},
    }
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return tmp_path


@pytest.fixture
def form_file(workspace, sample_form):
    path = workspace / "form.yaml"
    form = {k: v for k, v in sample_form.items() if k not in ("apiKey", "apiProvider")}
    path.write_text(yaml.safe_dump(form), encoding="utf-8")
    return str(path)


@pytest.fixture
def fake_generate(monkeypatch):
    calls = []

    def generate(self, prompt, provider, api_key):
        calls.append((prompt, provider, api_key))
        return "```markdown\n# Demo Project\n\nGenerated.\n```"

    monkeypatch.setattr(AIClient, "generate", generate)
    return calls


def run(workspace, *args):
    return main(["--config", str(workspace / "config.yaml"), *args])


class TestGenerateCommand:
    """Test cases for the generate command."""

    def test_writes_readme(self, workspace, form_file, fake_generate):
        assert run(workspace, "generate", "--form", form_file, "--key", OPENAI_KEY) == 0

        content = (workspace / "README.md").read_text(encoding="utf-8")
        assert content == "# Demo Project\n\nGenerated.\n"
        prompt, provider, key = fake_generate[0]
        assert provider == "openai"
        assert key == OPENAI_KEY
        assert "Project Name: Demo Project" in prompt

    def test_html_export(self, workspace, form_file, fake_generate):
        out = workspace / "docs" / "README.md"

        assert run(workspace, "generate", "--form", form_file, "--key", OPENAI_KEY,
                   "--out", str(out), "--html") == 0

        assert "<h1" in (workspace / "docs" / "README.html").read_text(encoding="utf-8")

    def test_key_from_environment(self, workspace, form_file, fake_generate, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "AIzaSy-from-env")

        assert run(workspace, "generate", "--form", form_file, "--provider", "gemini") == 0
        assert fake_generate[0][1:] == ("gemini", "AIzaSy-from-env")

    def test_remember_then_reuse_key(self, workspace, form_file, fake_generate):
        assert run(workspace, "generate", "--form", form_file, "--key", OPENAI_KEY, "--remember") == 0

        store = json.loads((workspace / "store.json").read_text(encoding="utf-8"))
        assert store["rememberApiKey"] == "true"
        assert store["apiKey"].startswith("v2:")
        assert OPENAI_KEY not in json.dumps(store)

        assert run(workspace, "generate", "--form", form_file) == 0
        assert fake_generate[1][2] == OPENAI_KEY

    def test_missing_key(self, workspace, form_file, fake_generate, capsys):
        assert run(workspace, "generate", "--form", form_file) == 2
        assert "API Key is missing" in capsys.readouterr().out
        assert fake_generate == []

    def test_provider_error(self, workspace, form_file, monkeypatch, capsys):
        def failing(self, prompt, provider, api_key):
            raise AIProviderError("quota", status=429)

        monkeypatch.setattr(AIClient, "generate", failing)

        assert run(workspace, "generate", "--form", form_file, "--key", OPENAI_KEY) == 1
        assert "Rate Limit Exceeded" in capsys.readouterr().out

    def test_save_template_and_share(self, workspace, form_file, fake_generate, capsys):
        assert run(workspace, "generate", "--form", form_file, "--key", OPENAI_KEY,
                   "--save-template", "cli", "--share") == 0

        out = capsys.readouterr().out
        assert 'Saved template "cli"' in out
        assert "https://readme.example/#data=" in out

    def test_unreadable_form(self, workspace, capsys):
        assert run(workspace, "generate", "--form", str(workspace / "missing.yaml"), "--key", OPENAI_KEY) == 1
        assert "Could not read form file" in capsys.readouterr().out


class TestShareCommands:
    """Test cases for share and import."""

    def test_share_then_import(self, workspace, form_file, capsys):
        assert run(workspace, "share", "--form", form_file) == 0
        url = capsys.readouterr().out.strip()
        assert url.startswith("https://readme.example/#data=")

        out = workspace / "imported.json"
        assert run(workspace, "import", url, "--out", str(out)) == 0

        imported = json.loads(out.read_text(encoding="utf-8"))
        assert imported["projectName"] == "Demo Project"

    def test_import_without_token(self, workspace):
        assert run(workspace, "import", "https://readme.example/") == 2

    def test_import_corrupt_token(self, workspace, capsys):
        assert run(workspace, "import", "https://readme.example/#data=%%%") == 1
        assert "corrupted or invalid" in capsys.readouterr().out


class TestTemplateAndDraftCommands:
    """Test cases for templates and draft management."""

    def test_template_lifecycle(self, workspace, form_file, capsys):
        assert run(workspace, "templates", "list") == 0
        assert "No templates saved" in capsys.readouterr().out

        assert run(workspace, "templates", "save", "web", "--form", form_file) == 0
        assert run(workspace, "templates", "save", "web", "--form", form_file) == 1
        assert run(workspace, "templates", "save", "web", "--form", form_file, "--force") == 0
        capsys.readouterr()

        assert run(workspace, "templates", "show", "web") == 0
        assert json.loads(capsys.readouterr().out)["projectName"] == "Demo Project"

        assert run(workspace, "templates", "delete", "web") == 0
        assert run(workspace, "templates", "delete", "web") == 1

    def test_template_name_required(self, workspace):
        assert run(workspace, "templates", "show") == 2

    def test_draft_show_and_clear(self, workspace, capsys):
        assert run(workspace, "draft", "show") == 0
        assert "No draft saved" in capsys.readouterr().out

        (workspace / "store.json").write_text(json.dumps({
            "readmeGenerator_draft": json.dumps({"step": 3, "formData": {"projectName": "Saved"}}),
        }), encoding="utf-8")

        assert run(workspace, "draft", "show") == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["step"] == 3
        assert shown["formData"]["projectName"] == "Saved"

        assert run(workspace, "draft", "clear") == 0
        assert "readmeGenerator_draft" not in json.loads((workspace / "store.json").read_text(encoding="utf-8"))
