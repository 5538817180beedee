# readme_pro/providers/github_client.py
"""
Repository metadata from the GitHub REST API.

Produces a FormState-shaped dict that prompt assembly consumes the same way
as wizard input. Fields that cannot be determined are set to the
``not-sure`` sentinel so the model is asked to infer them.
"""

from __future__ import annotations
import base64
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
import urllib.error
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..exceptions import GitHubAPIError, InvalidRepositoryURLError
from ..form_state import FLAG_DEFAULTS, NOT_SURE, FormState

logger = logging.getLogger(__name__)

ProjectMetadata = FormState

RELEVANT_EXTENSIONS = (
    ".js", ".ts", ".py", ".java", ".go", ".rb", ".php", ".cs", ".html", ".css", ".scss",
    ".md", ".json", ".yml", ".yaml", ".toml", ".xml", "dockerfile", "gemfile", "pom.xml",
)
EXCLUDED_DIRS = ("node_modules", ".git", "dist", "build", "coverage", "vendor", "target", "public/")
KNOWN_FRAMEWORKS = ("react", "vue", "angular", "svelte", "express", "next", "nuxt")
MAX_TREE_PATHS = 100
MAX_LISTED_DEPENDENCIES = 5


def parse_repo_url(repo_url: str) -> Tuple[str, str]:
    """
    Split a full GitHub URL into owner and repository name.

    Raises:
        InvalidRepositoryURLError: If the URL has no scheme/host or lacks owner/repo
    """
    parsed = urlparse((repo_url or "").strip())
    parts = [p for p in parsed.path.split("/") if p]
    if not parsed.scheme or not parsed.netloc or len(parts) < 2:
        raise InvalidRepositoryURLError(
            "Invalid GitHub repository URL format. Please use a full URL."
        )
    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[:-4]
    return owner, repo


def filter_tree_paths(tree: List[Dict[str, Any]]) -> List[str]:
    """File paths worth showing the model, capped at MAX_TREE_PATHS."""
    paths = []
    for node in tree:
        if node.get("type") != "blob":
            continue
        path = node.get("path", "")
        if any(path.startswith(d) for d in EXCLUDED_DIRS):
            continue
        lower = path.lower()
        if any(lower.endswith(ext) or ext.replace(".", "") in lower for ext in RELEVANT_EXTENSIONS):
            paths.append(path)
    return paths[:MAX_TREE_PATHS]


def parse_package_json(content: Optional[str], data: ProjectMetadata) -> None:
    """Update ``data`` in place from package.json content."""
    if not content:
        return
    try:
        package = json.loads(content)
    except ValueError:
        logger.warning("Could not parse package.json")
        return
    if not isinstance(package, dict):
        logger.warning("Could not parse package.json")
        return

    deps: Dict[str, Any] = {}
    deps.update(package.get("dependencies") or {})
    deps.update(package.get("devDependencies") or {})
    dep_names = list(deps)

    frameworks = [name for name in dep_names if name in KNOWN_FRAMEWORKS]
    if frameworks:
        data["frameworks"] = ", ".join(frameworks)
    if package.get("scripts"):
        data["scripts"] = ", ".join(package["scripts"])
    if dep_names:
        data["dependencies"] = ", ".join(dep_names[:MAX_LISTED_DEPENDENCIES])
    data["projectType"] = "web-app"
    if package.get("main"):
        data["mainEntryPoint"] = package["main"]
    if package.get("license"):
        data["license"] = package["license"]


def parse_requirements_txt(content: Optional[str], data: ProjectMetadata) -> None:
    """Update ``data`` in place from requirements.txt content."""
    if not content:
        return
    deps = [line.strip() for line in content.split("\n") if line.strip() and not line.startswith("#")]
    current = data.get("dependencies")
    prefix = f"{current}, " if current and current != NOT_SURE else ""
    data["dependencies"] = prefix + ", ".join(deps[:MAX_LISTED_DEPENDENCIES])
    data["projectType"] = "web-app"
    if not data.get("mainLanguage") or data["mainLanguage"] == NOT_SURE:
        data["mainLanguage"] = "python"


class GitHubAnalyzer:
    """Collects README-relevant metadata for one repository."""

    def __init__(self, api_base: str = "https://api.github.com", timeout: int = 30,
                 opener: Callable[..., Any] = urlopen):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._open = opener

    def _get(self, path: str, headers: Dict[str, str]) -> Optional[Any]:
        req = Request(f"{self.api_base}{path}", headers=headers)
        try:
            with self._open(req, timeout=self.timeout) as resp:
                return json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            if e.code == 404:
                return None
            try:
                message = json.loads(e.read().decode("utf-8")).get("message")
            except Exception:
                message = None
            raise GitHubAPIError(message or f"GitHub API request failed: {e.code}", status=e.code) from e
        except urllib.error.URLError as e:
            raise GitHubAPIError(f"Failed to reach GitHub: {e.reason}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise GitHubAPIError(f"Failed to decode GitHub response: {e}") from e

    def _file_content(self, owner: str, repo: str, file_path: str, headers: Dict[str, str]) -> Optional[str]:
        data = self._get(f"/repos/{owner}/{repo}/contents/{file_path}", headers)
        if not data or not isinstance(data, dict) or not data.get("content"):
            return None
        return base64.b64decode(data["content"]).decode("utf-8", errors="replace")

    def analyze(self, owner: str, repo: str, token: Optional[str] = None, is_pro: bool = True) -> ProjectMetadata:
        """
        Fetch and parse repository metadata.

        Args:
            owner: Repository owner
            repo: Repository name
            token: Optional personal access token for private repositories
            is_pro: False stops after the basic repository info

        Returns:
            FormState-shaped metadata

        Raises:
            GitHubAPIError: If the repository is missing or the API fails
        """
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        info = self._get(f"/repos/{owner}/{repo}", headers)
        if not info:
            raise GitHubAPIError("Repository not found or access denied.", status=404)

        language = info.get("language")
        data: ProjectMetadata = {
            "projectName": info.get("name") or repo,
            "description": info.get("description") or "",
            "mainLanguage": language.lower() if language else NOT_SURE,
            "author": (info.get("owner") or {}).get("login", ""),
            "license": (info.get("license") or {}).get("spdx_id") or NOT_SURE,
            "projectType": NOT_SURE,
            "fileStructure": NOT_SURE,
            "mainEntryPoint": NOT_SURE,
            "scripts": NOT_SURE,
            "frameworks": NOT_SURE,
            "dependencies": NOT_SURE,
            "features": NOT_SURE,
            "installation": NOT_SURE,
            "usage": NOT_SURE,
            "requirements": NOT_SURE,
            "demo": "",
            "contact": "",
            "acknowledgments": "",
            "tone": "professional",
        }
        data.update(FLAG_DEFAULTS)

        if not is_pro:
            logger.info(f"Basic analysis of {owner}/{repo} complete")
            return data

        branch = info.get("default_branch") or "main"
        tree = self._get(f"/repos/{owner}/{repo}/git/trees/{branch}?recursive=1", headers)
        nodes = tree.get("tree") if isinstance(tree, dict) else None
        if nodes:
            paths = filter_tree_paths(nodes)
            if paths:
                data["fileStructure"] = "\n".join(paths)

        parse_package_json(self._file_content(owner, repo, "package.json", headers), data)
        parse_requirements_txt(self._file_content(owner, repo, "requirements.txt", headers), data)

        if data["license"] == NOT_SURE and nodes:
            has_license_file = any(
                node.get("type") == "blob" and node.get("path", "").lower().startswith("license")
                for node in nodes
            )
            if has_license_file:
                data["license"] = "Exists (see LICENSE file)"

        logger.info(f"Analysis of {owner}/{repo} complete")
        return data
