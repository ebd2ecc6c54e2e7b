#!/usr/bin/env python3
"""
Hierarchical settings for the poker advisor.

Settings use dot notation (e.g. "advisor.blend.full_confidence_sample") and
are persisted as JSON. Every component registers its own tunables with
create() when it is constructed, so the file always lists every knob with
its current value.

Usage:
    from src.config.settings import Settings

    settings = Settings()
    settings.create("advisor.blend.exploit_threshold", default=0.5)
    threshold = settings.get("advisor.blend.exploit_threshold")

    settings.update("advisor.external.enabled", False)
    blend_settings = settings.get_group("advisor.blend")
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from box import Box

logger = logging.getLogger(__name__)


def _new_box(data: Optional[Dict[str, Any]] = None) -> Box:
    return Box(data or {}, default_box=True, box_dots=True)


class Settings:
    """
    Dot-notation settings manager with JSON persistence.

    Values live in a python-box Box so nested groups can be read either by
    dotted key or attribute. Thread-safe singleton: the first construction
    decides the backing file.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls, settings_file: Optional[Path] = None):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(Settings, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, settings_file: Optional[Path] = None):
        """
        Initialize the settings manager.

        Args:
            settings_file: Path to settings JSON file. Defaults to data/settings.json
        """
        if self._initialized:
            return

        self._initialized = True
        self._write_lock = Lock()

        if settings_file is None:
            self.settings_file = Path(__file__).parent.parent.parent / "data" / "settings.json"
        else:
            self.settings_file = Path(settings_file)

        self._settings = _new_box()
        self._defaults = _new_box()

        self._load_from_file()

        logger.info(f"Settings initialized from {self.settings_file}")

    def create(self, setting_name: str, default: Any) -> None:
        """
        Register a setting with its default value.

        A value already present in the settings file wins over the default.

        Args:
            setting_name: Dot-notation path (e.g., "tracker.sessions.idle_timeout_seconds")
            default: Default value for the setting
        """
        self._set_nested(self._defaults, setting_name, default)

        existing_value = self._get_nested(self._settings, setting_name)
        if existing_value is None:
            self._set_nested(self._settings, setting_name, default)
            self._save_to_file()
            logger.debug(f"Created setting '{setting_name}' with default value: {default}")
        else:
            logger.debug(f"Setting '{setting_name}' already exists with value: {existing_value} (default: {default})")

    def update(self, setting_name: str, value: Any) -> None:
        """
        Update an existing setting's value.

        Raises:
            KeyError: If the setting was never created
        """
        old_value = self._get_nested(self._settings, setting_name)
        if old_value is None:
            raise KeyError(f"Setting '{setting_name}' does not exist. Use create() first.")

        self._set_nested(self._settings, setting_name, value)
        self._save_to_file()

        logger.debug(f"Updated setting '{setting_name}': {old_value} -> {value}")

    def get(self, setting_name: str, fallback: Any = None) -> Any:
        """
        Get a setting's value.

        Args:
            setting_name: Dot-notation path
            fallback: Value to return if the setting and its default are missing

        Returns:
            Current value, the registered default, or fallback
        """
        value = self._get_nested(self._settings, setting_name)
        if value is not None:
            return value

        default = self._get_nested(self._defaults, setting_name)
        return default if default is not None else fallback

    def get_group(self, group_path: str) -> Dict[str, Any]:
        """
        Get all settings within a group, e.g. get_group("advisor.blend").

        Returns:
            Plain dict of the group, empty if the group does not exist
        """
        group_data = self._get_nested(self._settings, group_path)

        if group_data is None:
            logger.warning(f"Group '{group_path}' not found")
            return {}

        if isinstance(group_data, Box):
            return group_data.to_dict()

        return group_data if isinstance(group_data, dict) else {}

    def get_all(self) -> Dict[str, Any]:
        return self._settings.to_dict()

    def exists(self, setting_name: str) -> bool:
        return self._get_nested(self._settings, setting_name) is not None

    def reset(self, setting_name: str) -> None:
        """
        Reset a setting to its registered default.

        Raises:
            KeyError: If the setting has no default
        """
        default_value = self._get_nested(self._defaults, setting_name)

        if default_value is None:
            raise KeyError(f"Setting '{setting_name}' has no default value")

        self._set_nested(self._settings, setting_name, default_value)
        self._save_to_file()

        logger.info(f"Reset setting '{setting_name}' to default: {default_value}")

    def _get_nested(self, data: Box, path: str) -> Any:
        """Get a value using dot notation; empty groups read as None."""
        current = data
        for key in path.split('.'):
            if not isinstance(current, dict):
                return None
            current = current.get(key)
            if current is None:
                return None

        if isinstance(current, dict) and len(current) == 0:
            return None

        return current

    def _set_nested(self, data: Box, path: str, value: Any) -> None:
        keys = path.split('.')
        current = data

        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = _new_box()
            current = current[key]

        current[keys[-1]] = value

    def _load_from_file(self) -> None:
        """Load settings from the JSON file, tolerating a missing or corrupt file."""
        if not self.settings_file.exists():
            logger.info(f"Settings file not found, creating new: {self.settings_file}")
            self._save_to_file()
            return

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if isinstance(data, dict) and "settings" in data:
                data = data["settings"]

            self._settings = _new_box(data if isinstance(data, dict) else {})
            logger.info(f"Loaded settings from {self.settings_file}")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse settings file: {e}")
            logger.warning("Using empty settings")
            self._settings = _new_box()
        except OSError as e:
            logger.error(f"Failed to load settings file: {e}")
            self._settings = _new_box()

    def _save_to_file(self) -> None:
        """Save current settings, creating parent directories as needed."""
        data = {
            "settings": self._settings.to_dict(),
            "metadata": {
                "version": "1.0",
                "last_modified": datetime.now().isoformat()
            }
        }

        try:
            with self._write_lock:
                self.settings_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.settings_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2)

            logger.debug(f"Settings saved to {self.settings_file}")
        except PermissionError as e:
            logger.error(f"Permission denied writing settings file: {e}")
            raise
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            raise
