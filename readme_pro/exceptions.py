# readme_pro/exceptions.py

"""
Exception hierarchy for README Pro.
"""

from typing import Optional


class ReadmeProError(Exception):
    """Base class for all errors raised by this package."""


class CorruptShareLinkError(ReadmeProError):
    """Raised when a share token cannot be decoded back into form data."""

    DEFAULT_MESSAGE = "The shareable link appears to be corrupted or invalid."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.DEFAULT_MESSAGE)


class AIProviderError(ReadmeProError):
    """Raised when an AI provider request fails. Carries the HTTP status when known."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class GitHubAPIError(ReadmeProError):
    """Raised when the GitHub API returns an error other than 404."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class InvalidRepositoryURLError(ReadmeProError):
    """Raised when a repository URL cannot be split into owner and repo."""


class GenerationInProgressError(ReadmeProError):
    """Raised when a generation is requested while another is outstanding."""
