"""
Configuration Module for the CMS-1500 / HL7 Converter.

Settings live in ``config/settings.yaml``: wire separators, the pinned
segment schema variant, extraction thresholds and sentinels, OCR and
file intake limits. Every lookup carries a code default, so a key may be
left out of the file.

Usage:
    from config import get_config

    variant = get_config("schema.variant", "cms1500")
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SETTINGS = Path(__file__).parent / "settings.yaml"
PROJECT_ROOT = Path(__file__).parent.parent


class ConfigurationManager:
    """
    Process-wide holder of the loaded settings.

    The first instantiation loads the file; later ones return the same
    instance until :meth:`reset` is called (the CLI does so before
    honouring ``--config``, tests do so around every case).

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("codec.field_separator")
        '|'
    """

    _instance: Optional['ConfigurationManager'] = None

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load the settings file once.

        Args:
            config_path: Settings file. Defaults to config/settings.yaml.

        Raises:
            FileNotFoundError: If the settings file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            ValueError: If the file does not hold a mapping.
        """
        if self._initialized:
            return

        self.config_path = Path(config_path) if config_path else DEFAULT_SETTINGS
        self._config = self._read(self.config_path)
        self._initialized = True

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must hold a mapping: {path}")

        # Relative entries under "paths" are anchored at the project root
        paths = data.get('paths') or {}
        for key, value in paths.items():
            if value and not Path(value).is_absolute():
                paths[key] = str(PROJECT_ROOT / value)

        return data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as ``"extraction.quorum"``.

        Returns ``default`` when any part of the path is missing.
        """
        value: Any = self._config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    @classmethod
    def reset(cls) -> None:
        """Drop the loaded settings; the next access reloads them."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ``ConfigurationManager().get(key, default)``."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config']
