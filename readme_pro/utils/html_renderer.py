# readme_pro/utils/html_renderer.py
"""Standalone HTML copies of generated READMEs."""

from __future__ import annotations

import pathlib
from typing import Optional

import markdown

from .text_utils import TextUtils


class HTMLRenderer:
    """Renders README Markdown as a single self-contained HTML page."""

    MARKDOWN_EXTENSIONS = ("fenced_code", "tables", "toc")
    HIGHLIGHT_CSS_URL = "https://cdnjs.cloudflare.com/ajax/libs/highlight.js/11.9.0/styles/github-dark.min.css"

    DEFAULT_CSS = """
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Helvetica, Arial, sans-serif; max-width: 800px; margin: 40px auto; padding: 20px; line-height: 1.6; color: #333; }
pre { background: #1f2937; color: #f3f4f6; padding: 1em; border-radius: 8px; overflow: auto; }
code { font-family: 'Courier New', Courier, monospace; }
table { border-collapse: collapse; }
th, td { border: 1px solid #d0d7de; padding: 6px 13px; }
img { max-width: 100%; }
"""

    @classmethod
    def markdown_to_html(cls, md_text: str) -> str:
        """
        Render README Markdown to an HTML fragment.

        Parameters
        ----------
        md_text : str
            README source; None is treated as empty.

        Returns
        -------
        str
            HTML5 body content with heading ids for in-page links.
        """
        return markdown.markdown(
            md_text or "",
            extensions=list(cls.MARKDOWN_EXTENSIONS),
            output_format="html5",
        )

    @classmethod
    def build_html_document(
        cls,
        body_html: str,
        *,
        title: str = "README",
        css: Optional[str] = None,
    ) -> str:
        """
        Wrap rendered body content in a full page.

        Parameters
        ----------
        body_html : str
            Output of :meth:`markdown_to_html`.
        title : str, optional
            Page title, escaped before use. Defaults to "README".
        css : Optional[str], optional
            Inline stylesheet replacing ``DEFAULT_CSS``.

        Returns
        -------
        str
            The page source.
        """
        style = cls.DEFAULT_CSS if css is None else css
        head = "\n".join([
            '  <meta charset="UTF-8" />',
            f"  <title>{TextUtils.escape_html(title)}</title>",
            f'  <link rel="stylesheet" href="{cls.HIGHLIGHT_CSS_URL}">',
            f"  <style>\n{style}\n  </style>",
        ])
        return f'<!DOCTYPE html>\n<html lang="en">\n<head>\n{head}\n</head>\n<body>\n{body_html}\n</body>\n</html>'

    @classmethod
    def export_readme(cls, readme: str, html_path: str, *, title: str = "README") -> str:
        """Write ``readme`` as an HTML page at ``html_path`` and return the path."""
        page = cls.build_html_document(cls.markdown_to_html(readme), title=title)
        target = pathlib.Path(html_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(page, encoding="utf-8")
        return str(target)
