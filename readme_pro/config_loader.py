# readme_pro/config_loader.py

"""
Configuration for README Pro.

Built-in defaults are overlaid with the user's config.yaml (nested sections
merge key by key). A few settings can also be overridden from the environment.
"""

import copy
import os
import yaml
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay ``overrides`` onto ``base``; sections present in both are merged recursively."""
    result = dict(base)
    for name, value in overrides.items():
        current = result.get(name)
        if isinstance(current, dict) and isinstance(value, dict):
            result[name] = _deep_merge(current, value)
        else:
            result[name] = value
    return result


class ConfigLoader:
    """Settings for storage, encryption, AI providers, output and logging."""

    DEFAULT_CONFIG = {
        'storage': {
            'file': '~/.readme_pro/store.json'
        },
        'security': {
            'user_agent': 'readme-pro-cli',
            'origin': '',
            'pbkdf2_iterations': 100000
        },
        'ai': {
            'provider': 'openai',
            'openai_model': 'gpt-3.5-turbo',
            'gemini_model': 'gemini-1.5-flash-latest',
            'timeout': 120
        },
        'github': {
            'api_base': 'https://api.github.com',
            'timeout': 30
        },
        'autosave': {
            'delay': 0.5
        },
        'share': {
            'base_url': 'https://readme-pro.app/'
        },
        'output': {
            'file': 'README.md',
            'html': False
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'file': 'readme_pro.log'
        }
    }

    def __init__(self, config_path: str = 'config.yaml'):
        """
        Args:
            config_path: YAML file to read; a missing file means defaults only
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _read_user_config(self) -> Optional[Dict[str, Any]]:
        if not os.path.exists(self.config_path):
            logger.info(f"No config file at {self.config_path}, using defaults")
            return None

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
            return None

        if not isinstance(user_config, dict):
            logger.warning(f"Ignoring config {self.config_path}: top level is not a mapping")
            return None
        return user_config

    def _load_config(self) -> Dict[str, Any]:
        config = copy.deepcopy(self.DEFAULT_CONFIG)
        user_config = self._read_user_config()
        if user_config:
            config = _deep_merge(config, user_config)
            logger.info(f"Loaded configuration from {self.config_path}")
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as ``'ai.timeout'``.

        Args:
            key: Section and option names joined by dots
            default: Returned when any part of the path is missing

        Returns:
            The configured value or ``default``
        """
        node: Any = self.config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def get_store_file(self) -> str:
        """Key-value store path, with ``~`` expanded."""
        return os.path.expanduser(self.get('storage.file', '~/.readme_pro/store.json'))

    def get_user_agent(self) -> str:
        return self.get('security.user_agent', 'readme-pro-cli')

    def get_origin(self) -> str:
        return self.get('security.origin', '')

    def get_pbkdf2_iterations(self) -> int:
        return int(self.get('security.pbkdf2_iterations', 100000))

    def get_provider(self) -> str:
        """Default AI provider; README_PRO_PROVIDER takes precedence."""
        return os.getenv('README_PRO_PROVIDER') or self.get('ai.provider', 'openai')

    def get_ai_timeout(self) -> int:
        return int(self.get('ai.timeout', 120))

    def get_github_api_base(self) -> str:
        return self.get('github.api_base', 'https://api.github.com')

    def get_github_timeout(self) -> int:
        return int(self.get('github.timeout', 30))

    def get_autosave_delay(self) -> float:
        """Seconds of inactivity before a draft is written."""
        return float(self.get('autosave.delay', 0.5))

    def get_share_base_url(self) -> str:
        return self.get('share.base_url', 'https://readme-pro.app/')

    def get_output_file(self) -> str:
        return self.get('output.file', 'README.md')

    def is_html_export(self) -> bool:
        """Whether an HTML copy is written next to the README by default."""
        return bool(self.get('output.html', False))

    def get_log_level(self) -> str:
        return self.get('logging.level', 'INFO')

    def get_log_format(self) -> str:
        return self.get('logging.format', '%(levelname)s - %(message)s')

    def get_log_file(self) -> str:
        return self.get('logging.file', 'readme_pro.log')
