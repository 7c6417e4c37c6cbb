# ==============================================================================
# ARCHIVE INDEXER - CONFIGURATION MODULE
# ==============================================================================
# Centralized configuration management for the application.
#
# This module handles:
#   - Loading/saving configuration from JSON file
#   - Default values for all settings
#   - Resolution of the index cache directory
#
# Configuration is stored in the user data directory (see paths.Paths).
#
# Usage:
#   from archive_indexer.core.config import Config
#   config = Config()
#   config.load()
#   print(config.index_dir)
#   config.category_bucket_size = 500
#   config.save()
# ==============================================================================

import os
import json
from typing import Optional, Dict, Any

from .paths import Paths


# ==============================================================================
# DEFAULT CONFIGURATION VALUES
# ==============================================================================
# These are used when no config file exists or when values are missing.

DEFAULT_CONFIG = {
    # -------------------------------------------------------------------------
    # INDEX CACHE
    # -------------------------------------------------------------------------
    # Directory for persisted *.idx files ("" = user data dir/indexes)
    "index_dir": "",

    # -------------------------------------------------------------------------
    # SCANNING
    # -------------------------------------------------------------------------
    # Entries per ordinal category bucket (0 = no bucketing)
    "category_bucket_size": 1000,

    # Header-sniff entries whose archive metadata declares no type
    "sniff_unknown_types": True,

    # -------------------------------------------------------------------------
    # ADVANCED
    # -------------------------------------------------------------------------
    # Enable debug logging
    "debug_mode": False,
}

# Upper bound for category_bucket_size
MAX_BUCKET_SIZE = 1_000_000


# ==============================================================================
# CONFIGURATION CLASS
# ==============================================================================
class Config:
    """
    Configuration manager for Archive Indexer.

    Handles loading, saving, and accessing application settings.
    Settings are stored in a JSON file and can be accessed as
    properties on this object.

    Attributes:
        config_path: Path to the configuration file
        data: Dictionary containing all settings
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to config file. If None, uses default location.
        """
        self.config_path = config_path if config_path else Paths.get_config_path()

        # Initialize with defaults
        self.data: Dict[str, Any] = DEFAULT_CONFIG.copy()

        # Track if config has been modified
        self._modified = False

    # -------------------------------------------------------------------------
    # LOADING AND SAVING
    # -------------------------------------------------------------------------

    def load(self) -> bool:
        """
        Load configuration from file.

        If the file doesn't exist, defaults are used.
        Missing keys are filled with defaults, unknown keys are ignored.

        Returns:
            True if file was loaded, False if using defaults
        """
        if not os.path.isfile(self.config_path):
            print(f"[INFO] Config file not found, using defaults")
            return False

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except json.JSONDecodeError as e:
            print(f"[ERROR] Invalid config file: {e}")
            return False
        except OSError as e:
            print(f"[ERROR] Failed to load config: {e}")
            return False

        if not isinstance(loaded, dict):
            print(f"[ERROR] Invalid config file: top level must be an object")
            return False

        for key, value in loaded.items():
            if key in self.data:
                self.data[key] = value

        print(f"[INFO] Loaded config from {self.config_path}")
        self._modified = False
        return True

    def save(self) -> bool:
        """
        Save configuration to file.

        Creates the directory if it doesn't exist.

        Returns:
            True if saved successfully
        """
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.config_path)), exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.data, f, indent=4, sort_keys=True)

            print(f"[INFO] Saved config to {self.config_path}")
            self._modified = False
            return True

        except OSError as e:
            print(f"[ERROR] Failed to save config: {e}")
            return False

    def reset_to_defaults(self):
        """Reset all settings to their default values."""
        self.data = DEFAULT_CONFIG.copy()
        self._modified = True

    @property
    def is_modified(self) -> bool:
        return self._modified

    # -------------------------------------------------------------------------
    # PROPERTY ACCESS
    # -------------------------------------------------------------------------

    @property
    def index_dir(self) -> str:
        """Get the directory holding persisted index files."""
        configured = self.data.get('index_dir', '')
        if configured:
            return os.path.abspath(os.path.expanduser(configured))
        return Paths.get_index_dir()

    @index_dir.setter
    def index_dir(self, value: str):
        self.data['index_dir'] = value
        self._modified = True

    @property
    def category_bucket_size(self) -> int:
        """Get the number of entry ids grouped into one category bucket."""
        return self.data.get('category_bucket_size', 1000)

    @category_bucket_size.setter
    def category_bucket_size(self, value: int):
        self.data['category_bucket_size'] = max(0, min(MAX_BUCKET_SIZE, int(value)))
        self._modified = True

    @property
    def sniff_unknown_types(self) -> bool:
        """Check if entries without a declared type are header-sniffed."""
        return self.data.get('sniff_unknown_types', True)

    @sniff_unknown_types.setter
    def sniff_unknown_types(self, value: bool):
        self.data['sniff_unknown_types'] = bool(value)
        self._modified = True

    @property
    def debug_mode(self) -> bool:
        """Check if debug mode is enabled."""
        return self.data.get('debug_mode', False)

    @debug_mode.setter
    def debug_mode(self, value: bool):
        self.data['debug_mode'] = bool(value)
        self._modified = True

    # -------------------------------------------------------------------------
    # GENERIC ACCESS
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found
        """
        return self.data.get(key, default)

    def set(self, key: str, value: Any):
        """Set a configuration value."""
        self.data[key] = value
        self._modified = True

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access: config['key']"""
        return self.data[key]

    def __setitem__(self, key: str, value: Any):
        """Allow dictionary-style setting: config['key'] = value"""
        self.data[key] = value
        self._modified = True


# ==============================================================================
# GLOBAL CONFIG INSTANCE
# ==============================================================================

_global_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Creates and loads config on first call.

    Returns:
        The global Config instance
    """
    global _global_config

    if _global_config is None:
        _global_config = Config()
        _global_config.load()

    return _global_config


def set_config(config: Optional[Config]):
    """Replace the global configuration instance (None forces a reload)."""
    global _global_config
    _global_config = config
