"""
Comparison settings management.

Options live in a JSON file, either flat with prefixed keys::

    {"compareFolders.ignoreWhiteSpaces": true}

or nested under a ``compareFolders`` object::

    {"compareFolders": {"ignoreWhiteSpaces": true}}
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable, Optional

from foldercompare.core.errors import ConfigurationError
from foldercompare.core.models import SETTINGS_PREFIX, CompareOptions


SETTINGS_SECTION = SETTINGS_PREFIX.rstrip('.')


class SettingsManager:
    """Manager for loading/saving comparison settings."""

    def __init__(self, settings_path: Optional[Path | str] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._options: Optional[CompareOptions] = None
        self._observers: list[Callable[[CompareOptions], None]] = []

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'FolderCompare' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'foldercompare' / 'settings.json'

    @property
    def options(self) -> CompareOptions:
        """Get current options, loading from disk if needed."""
        if self._options is None:
            self._options = self.load()
        return self._options

    def load(self) -> CompareOptions:
        """
        Load options from disk.

        A missing file gives the default options.

        Raises:
            ConfigurationError: if the file is not valid JSON or holds bad values
        """
        if not self.settings_path.exists():
            logging.debug(f"SettingsManager - No settings at {self.settings_path}, using defaults")
            return CompareOptions()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logging.error(f"SettingsManager - Invalid JSON in {self.settings_path}: {e}")
            raise ConfigurationError(f"Invalid settings file {self.settings_path}: {e}") from e
        except OSError as e:
            logging.error(f"SettingsManager - Could not read {self.settings_path}: {e}")
            raise ConfigurationError(f"Could not read settings file {self.settings_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file {self.settings_path} must hold a JSON object"
            )

        section = data.get(SETTINGS_SECTION)
        if isinstance(section, dict):
            data = section

        self._options = CompareOptions.from_mapping(data)
        return self._options

    def save(self, options: Optional[CompareOptions] = None) -> bool:
        """Save options to disk, with prefixed keys."""
        options = options or self._options
        if options is None:
            return False

        data = {SETTINGS_PREFIX + key: value for key, value in options.to_mapping().items()}

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logging.error(f"SettingsManager - Failed to save settings to {self.settings_path}: {e}")
            return False

        self._options = options
        self._notify_observers()
        return True

    def reset(self) -> CompareOptions:
        """Reset to default options."""
        self._options = CompareOptions()
        self.save()
        return self._options

    def add_observer(self, callback: Callable[[CompareOptions], None]) -> None:
        """Add a callback to be notified of settings changes."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[CompareOptions], None]) -> None:
        """Remove a settings change observer."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        """Notify all observers of settings change."""
        for callback in self._observers:
            try:
                callback(self._options)
            except Exception:
                logging.exception("SettingsManager - Settings observer failed")
