# ==============================================================================
# ARCHIVE INDEXER - MAIN ENTRY POINT
# ==============================================================================
# Launcher for the Archive Indexer command-line interface.
#
# Usage:
#   python main.py index data.grf    # Build or refresh an index
#   python main.py --version         # Show version
#   python main.py --paths           # Show data paths
#   python main.py --check           # Check dependencies
#
# Any other arguments are handed to archive_indexer.cli unchanged.
# ==============================================================================

import sys
import traceback


# ==============================================================================
# DEPENDENCY CHECKS
# ==============================================================================

def check_dependencies():
    """
    Check if required dependencies are installed.

    Returns:
        Tuple of (all_ok, missing_packages)
    """
    missing = []

    core_deps = ['sqlalchemy']

    for dep in core_deps:
        try:
            __import__(dep)
        except ImportError:
            missing.append(dep)

    return (len(missing) == 0, missing)


# ==============================================================================
# LAUNCHER OPTIONS
# ==============================================================================

def show_version():
    from archive_indexer import __version__
    print(f"Archive Indexer v{__version__}")
    print("Incremental indexing of game asset archives")
    return 0


def show_paths():
    from archive_indexer.core.config import get_config
    from archive_indexer.core.paths import Paths

    config = get_config()
    print("Archive Indexer Paths:")
    print(f"  Frozen:         {Paths.is_frozen()}")
    print(f"  App Path:       {Paths.get_app_dir()}")
    print(f"  User Data:      {Paths.get_user_data_dir()}")
    print(f"  Config:         {config.config_path}")
    print(f"  Indexes:        {config.index_dir}")
    return 0


def show_check():
    print("Checking dependencies...")
    print(f"  Python: {sys.version}")

    all_ok, missing = check_dependencies()
    if all_ok:
        print("[OK] All core dependencies installed")
    else:
        print(f"[MISSING] {', '.join(missing)}")

    print("\nOptional dependencies:")
    try:
        from PyQt6.QtCore import PYQT_VERSION_STR
        print(f"  [OK] PyQt6 {PYQT_VERSION_STR}")
    except ImportError:
        print(f"  [--] PyQt6 (not available)")

    return 0 if all_ok else 1


# ==============================================================================
# MAIN FUNCTION
# ==============================================================================

def main():
    """Handle launcher options, then run the CLI."""
    argv = sys.argv[1:]

    if '--version' in argv or '-v' in argv:
        return show_version()
    if '--paths' in argv:
        return show_paths()
    if '--check' in argv:
        return show_check()

    all_ok, missing = check_dependencies()
    if not all_ok:
        print(f"[ERROR] Missing required packages: {', '.join(missing)}")
        print(f"Install with: pip install {' '.join(missing)}")
        return 1

    try:
        from archive_indexer.cli import main as cli_main
        return cli_main(argv)
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted")
        return 130
    except Exception as e:
        print(f"\n[FATAL ERROR] {e}")
        traceback.print_exc()
        return 1


# ==============================================================================
# SCRIPT ENTRY POINT
# ==============================================================================
if __name__ == "__main__":
    sys.exit(main())
