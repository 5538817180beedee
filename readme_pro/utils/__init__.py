"""Utility modules for README generation."""

from .text_utils import TextUtils
from .html_renderer import HTMLRenderer
from .debounce import Debouncer

__all__ = [
    "TextUtils",
    "HTMLRenderer",
    "Debouncer",
]
