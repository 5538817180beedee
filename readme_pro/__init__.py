# readme_pro/__init__.py
"""
README Pro

Generates project READMEs with an AI provider from a wizard form or a
GitHub repository, with encrypted key storage, drafts, templates and
shareable links.
"""

__version__ = "1.0.0"
__author__ = "Supratik Roy"
