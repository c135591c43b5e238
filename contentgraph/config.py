"""
Configuration management for contentgraph.

This module handles loading and accessing configuration values from
config.yaml, with built-in defaults for anything the file leaves out.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel

from .normalize.grouping import UnknownContentTypePolicy

PREVIEW_HOST = "preview.contentful.com"


class NormalizeSettings(BaseModel):
    """Settings a sync run needs, resolved from configuration."""

    host: str = "cdn.contentful.com"
    conflict_prefix: str = "contentful"
    unknown_content_types: UnknownContentTypePolicy = UnknownContentTypePolicy.DROP
    log_unresolved_references: bool = False

    @property
    def stores_sync_cursor(self) -> bool:
        """The preview host only supports initial syncs, so its cursor is never kept."""
        return self.host != PREVIEW_HOST


class ConfigManager:
    """
    Manages configuration loading and access for contentgraph.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logging.warning(f"Failed to load configuration, using defaults: {e}")
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "source": {
                "space_id": None,
                "host": "cdn.contentful.com",
                "snapshot_path": "sample_data/snapshot.json"
            },
            "store": {
                "filename": "contentgraph.db"
            },
            "normalize": {
                "conflict_prefix": "contentful",
                "unknown_content_types": "drop",
                "log_unresolved_references": False
            },
            "paths": {
                "log_file": "contentgraph.log",
                "output_file": None
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "store.filename")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("source.host")  # Returns "cdn.contentful.com"
            config.get("normalize.conflict_prefix")  # Returns "contentful"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def space_id(self) -> Optional[str]:
        return self.get("source.space_id")

    @property
    def host(self) -> str:
        return self.get("source.host", "cdn.contentful.com")

    @property
    def snapshot_path(self) -> str:
        return self.get("source.snapshot_path", "sample_data/snapshot.json")

    @property
    def database_filename(self) -> str:
        """Get node store filename."""
        return self.get("store.filename", "contentgraph.db")

    @property
    def log_filename(self) -> str:
        return self.get("paths.log_file", "contentgraph.log")

    @property
    def output_filename(self) -> Optional[str]:
        return self.get("paths.output_file")

    def normalize_settings(self) -> NormalizeSettings:
        """
        Build the settings for a sync run.

        Raises:
            ValueError: if ``normalize.unknown_content_types`` is not a known policy
        """
        return NormalizeSettings(
            host=self.host,
            conflict_prefix=self.get("normalize.conflict_prefix", "contentful"),
            unknown_content_types=UnknownContentTypePolicy(
                self.get("normalize.unknown_content_types", "drop")
            ),
            log_unresolved_references=bool(self.get("normalize.log_unresolved_references", False)),
        )


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
