"""
Clients for the external services README Pro talks to.
"""

from .ai_client import AIClient, AIConfig, get_api_error_message
from .github_client import GitHubAnalyzer, parse_repo_url

__all__ = ['AIClient', 'AIConfig', 'get_api_error_message', 'GitHubAnalyzer', 'parse_repo_url']
