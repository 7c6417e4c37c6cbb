# ==============================================================================
# ARCHIVE INDEXER - PATH UTILITIES
# ==============================================================================
# Centralized path handling that works for both development and frozen exe.
#
# User data (config, persisted archive indexes) lives in a per-platform
# directory:
#   - Windows: %APPDATA%/ArchiveIndexer/
#   - Linux:   $XDG_CONFIG_HOME/ArchiveIndexer/ (~/.config by default)
#   - macOS:   ~/Library/Application Support/ArchiveIndexer/
#
# Usage:
#   from archive_indexer.core.paths import Paths
#   config_path = Paths.get_config_path()
#   index_dir = Paths.get_index_dir()
# ==============================================================================

import os
import sys
from typing import Optional


class Paths:
    """
    Centralized path management for Archive Indexer.

    Handles the difference between running as a Python script and running
    as a frozen PyInstaller executable. Computed directories are cached on
    the class; call reset() to forget them (tests do this after changing
    the environment).
    """

    # Application name for folder creation
    APP_NAME = "ArchiveIndexer"

    # Sub-directory holding the persisted *.idx files
    INDEX_DIR_NAME = "indexes"

    # Cache for computed paths
    _app_dir: Optional[str] = None
    _user_data_dir: Optional[str] = None

    @classmethod
    def reset(cls):
        """Forget cached directories so they are recomputed on next access."""
        cls._app_dir = None
        cls._user_data_dir = None

    @classmethod
    def is_frozen(cls) -> bool:
        """
        Check if running as a frozen executable.

        Returns:
            True if running as PyInstaller exe, False if running as script
        """
        return getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS')

    @classmethod
    def get_app_dir(cls) -> str:
        """
        Get the application directory.

        For script: The project root directory
        For exe: The directory containing the executable
        """
        if cls._app_dir is None:
            if cls.is_frozen():
                cls._app_dir = os.path.dirname(sys.executable)
            else:
                # This file is in archive_indexer/core/, so go up 3 levels
                cls._app_dir = os.path.dirname(
                    os.path.dirname(
                        os.path.dirname(os.path.abspath(__file__))
                    )
                )
        return cls._app_dir

    @classmethod
    def get_user_data_dir(cls) -> str:
        """
        Get the user data directory.

        This is where we store user-specific files like:
        - Configuration (config.json)
        - Persisted archive indexes (indexes/*.idx)

        Returns:
            Absolute path to user data directory
        """
        if cls._user_data_dir is None:
            if sys.platform == 'win32':
                base = os.environ.get('APPDATA', os.path.expanduser('~'))
                cls._user_data_dir = os.path.join(base, cls.APP_NAME)
            elif sys.platform == 'darwin':
                cls._user_data_dir = os.path.join(
                    os.path.expanduser('~'),
                    'Library', 'Application Support', cls.APP_NAME
                )
            else:
                base = os.environ.get('XDG_CONFIG_HOME',
                                      os.path.join(os.path.expanduser('~'), '.config'))
                cls._user_data_dir = os.path.join(base, cls.APP_NAME)

            os.makedirs(cls._user_data_dir, exist_ok=True)

        return cls._user_data_dir

    @classmethod
    def get_config_path(cls) -> str:
        """
        Get the path to the configuration file.

        Returns:
            Absolute path to config.json
        """
        return os.path.join(cls.get_user_data_dir(), 'config.json')

    @classmethod
    def get_index_dir(cls) -> str:
        """
        Get the default directory for persisted archive indexes.

        The directory is not created here; the index writer creates it
        right before the first write.

        Returns:
            Absolute path to the index directory
        """
        return os.path.join(cls.get_user_data_dir(), cls.INDEX_DIR_NAME)
