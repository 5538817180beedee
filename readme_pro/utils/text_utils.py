# readme_pro/utils/text_utils.py
"""Text helpers for form input and model output."""

from __future__ import annotations

import html
import re


class TextUtils:
    """Small string transformations shared by the form model and the CLI."""

    # A model sometimes wraps the whole README in a ```markdown fence
    _MARKDOWN_OPENER = re.compile(r"```markdown\n")
    _ANY_FENCE = re.compile(r"```")

    @staticmethod
    def escape_html(text: str, quote: bool = True) -> str:
        """
        Make user text safe to embed in HTML.

        Parameters
        ----------
        text : str
            Raw text; None is treated as empty.
        quote : bool, optional
            Whether ``"`` and ``'`` are escaped too. Form collection passes
            False so quotes reach the prompt unchanged.

        Returns
        -------
        str
            Text with ``&``, ``<`` and ``>`` (and optionally quotes) replaced by entities.
        """
        return html.escape(text or "", quote=quote)

    @staticmethod
    def unescape_html(text: str) -> str:
        """Inverse of :meth:`escape_html`."""
        return html.unescape(text or "")

    @staticmethod
    def strip_markdown_fences(text: str) -> str:
        """
        Clean model output before it is saved.

        Parameters
        ----------
        text : str
            README as returned by the provider.

        Returns
        -------
        str
            The text with a leading ```markdown opener and every remaining
            ``` marker removed, trimmed at both ends.
        """
        without_opener = TextUtils._MARKDOWN_OPENER.sub("", text or "")
        return TextUtils._ANY_FENCE.sub("", without_opener).strip()

    @staticmethod
    def ensure_newline_ending(text: str) -> str:
        """Exactly one trailing newline, or an empty string for empty input."""
        body = (text or "").rstrip("\n")
        return f"{body}\n" if body else ""
