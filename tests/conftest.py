# tests/conftest.py

"""
Shared fixtures for the README Pro test suite.
"""

import pytest

from readme_pro.security import BrowserAmbientSecret, SecurityModule
from readme_pro.storage import MemoryStore, ReadmeStorage


@pytest.fixture
def ambient():
    """Ambient secret matching a typical browser session."""
    return BrowserAmbientSecret("test-user-agent", "https://readme.example")


@pytest.fixture
def security(ambient):
    """Security module with the real AES-GCM path."""
    return SecurityModule(ambient)


@pytest.fixture
def store():
    """Empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def storage(store, security):
    """Persistence layer over the in-memory store."""
    return ReadmeStorage(store, security)


@pytest.fixture
def sample_form():
    """A filled-in form including secret fields."""
    return {
        "projectName": "Demo Project",
        "description": "A tool that turns project notes into README files.",
        "projectType": "cli",
        "mainLanguage": "python",
        "frameworks": "argparse",
        "dependencies": "pyyaml, tqdm",
        "features": "Drafts, templates, share links",
        "installation": "pip install demo",
        "usage": "demo --help",
        "requirements": "Python 3.9+",
        "license": "MIT",
        "author": "Jane Doe",
        "contact": "jane@example.com",
        "acknowledgments": "",
        "demo": "",
        "tone": "friendly",
        "includeInstall": True,
        "includeUsage": True,
        "includeAPI": False,
        "includeContrib": True,
        "apiKey": "sk-super-secret-value-1234567890abcdefghij",
        "apiProvider": "openai",
    }
