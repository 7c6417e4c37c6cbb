# ==============================================================================
# ARCHIVE INDEXER - COMMAND LINE INTERFACE
# ==============================================================================
# Command-line front end for the ArchiveBrowser.
#
# Commands:
#   - index:      load or build the index of an archive and save it
#   - reindex:    discard the index and rebuild it from scratch
#   - tree:       print the category tree of an archive
#   - show:       classify one entry and print its header
#   - cache-path: print where the index of an archive is stored
#   - formats:    list declared types and the readers tried for each
#
# Usage:
#   archive-indexer index data.grf
#   archive-indexer tree data.grf --depth 2
#   archive-indexer show data.grf 1234
#   archive-indexer --config my.json reindex data.grf
# ==============================================================================

import sys
import argparse
from typing import List, Optional

from .browser import ArchiveBrowser
from .core.config import Config, get_config, set_config
from .core.errors import ArchiveOpenError
from .core.hasher import index_file_path
from .core.index import IndexCategory
from .formats.file_types import FileType
from .formats.registry import FormatRegistry
from .tasks.scheduler import TaskScheduler


# ==============================================================================
# COLOR HELPERS FOR TERMINAL OUTPUT
# ==============================================================================
class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        """Disable colors (for non-supporting terminals)."""
        cls.HEADER = ''
        cls.BLUE = ''
        cls.CYAN = ''
        cls.GREEN = ''
        cls.YELLOW = ''
        cls.RED = ''
        cls.BOLD = ''
        cls.END = ''


def print_header(text: str):
    """Print a header."""
    print(f"\n{Colors.BOLD}{Colors.CYAN}{'=' * 60}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}  {text}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{'=' * 60}{Colors.END}\n")


def print_success(text: str):
    print(f"{Colors.GREEN}✓ {text}{Colors.END}")


def print_error(text: str):
    print(f"{Colors.RED}✗ {text}{Colors.END}")


def print_info(text: str):
    print(f"{Colors.BLUE}ℹ {text}{Colors.END}")


def print_warning(text: str):
    print(f"{Colors.YELLOW}⚠ {text}{Colors.END}")


def progress_callback(current: int, total: int, text: str):
    """Progress bar for scheduler steps."""
    percent = (current / total) * 100 if total > 0 else 0
    bar_length = 30
    filled = int(bar_length * current / total) if total > 0 else 0
    bar = '█' * filled + '░' * (bar_length - filled)

    max_text_len = 40
    if len(text) > max_text_len:
        text = '...' + text[-(max_text_len - 3):]

    print(f"\r[{bar}] {percent:5.1f}% | {current}/{total} | {text}", end='', flush=True)

    if current >= total:
        print()


# ==============================================================================
# HELPERS
# ==============================================================================
def load_config(args) -> Config:
    """Use the --config file when given, the global config otherwise."""
    if args.config:
        config = Config(args.config)
        config.load()
        set_config(config)
        return config
    return get_config()


def open_browser(args) -> Optional[ArchiveBrowser]:
    """
    Open the archive named on the command line and bring its index up to date.

    Returns:
        The browser, or None if the archive could not be opened
    """
    config = load_config(args)
    callback = None if args.quiet else progress_callback
    browser = ArchiveBrowser(config=config, scheduler=TaskScheduler(callback))

    try:
        browser.open_archive(args.archive)
    except ArchiveOpenError as e:
        print_error(str(e))
        return None

    browser.scheduler.run_until_idle()
    return browser


def finish(browser: ArchiveBrowser) -> int:
    """Shut the browser down (saving a changed index) and pick the exit code."""
    browser.shutdown()
    if browser.last_write_error:
        print_error(f"Index could not be saved: {browser.last_write_error}")
        return 1
    return 0


def print_category(category: IndexCategory, depth: int, max_depth: Optional[int],
                   show_entries: bool):
    indent = "  " * depth
    for child in category.children:
        print(f"{indent}{Colors.BOLD}{child.name}{Colors.END} ({child.num_entries(recursive=True)})")
        if max_depth is None or depth + 1 < max_depth:
            print_category(child, depth + 1, max_depth, show_entries)
    if show_entries:
        for entry in category.entries:
            print(f"{indent}{entry.entry_id:>8}  {entry.name}")


# ==============================================================================
# COMMANDS
# ==============================================================================
def cmd_index(args) -> int:
    """Load or build the index of an archive."""
    browser = open_browser(args)
    if browser is None:
        return 1

    status = browser.last_cache_status.value if browser.last_cache_status else "unknown"
    print_info(f"Cache: {status}")
    print_success(f"{browser.index.num_entries} entries indexed "
                  f"({browser.index.highest_entry_id}/{browser.reader.entry_count()})")
    return finish(browser)


def cmd_reindex(args) -> int:
    """Discard the index and rebuild it."""
    browser = open_browser(args)
    if browser is None:
        return 1

    if not browser.reindex():
        print_error("Could not start reindexing")
        browser.shutdown()
        return 1
    browser.scheduler.run_until_idle()

    print_success(f"Reindexed {browser.index.num_entries} entries")
    return finish(browser)


def cmd_tree(args) -> int:
    """Print the category tree."""
    browser = open_browser(args)
    if browser is None:
        return 1

    print_header(f"Categories: {browser.archive_path}")
    print_category(browser.index.root, 0, args.depth, args.entries)
    print(f"\nTotal: {browser.index.num_entries} entries")
    return finish(browser)


def cmd_show(args) -> int:
    """Classify one entry and print what was found."""
    browser = open_browser(args)
    if browser is None:
        return 1

    entry = browser.index.find_entry(args.entry_id)
    if entry is None:
        print_error(f"Entry {args.entry_id} is not indexed")
        browser.shutdown()
        return 1

    file_reader = browser.view_entry(entry)
    print(f"Entry:     {entry.entry_id}")
    print(f"Name:      {entry.name}")
    print(f"Declared:  {entry.file_type.label}")
    print(f"Reader:    {file_reader.kind.value}")
    print(f"Category:  {' / '.join(entry.category_path)}")
    print(f"Size:      {file_reader.size} bytes")
    print(f"Header:    {file_reader.header().hex(' ')}")
    return finish(browser)


def cmd_cache_path(args) -> int:
    """Print the index file location of an archive."""
    config = load_config(args)
    print(index_file_path(args.archive, config.index_dir))
    return 0


def cmd_formats(args) -> int:
    """List declared types and their candidate readers."""
    config = load_config(args)
    print_header("Supported Types")

    print(f"{'Type':<14} {'Readers (in order)':<40}")
    print("-" * 56)
    for file_type in [FileType.UNKNOWN] + FormatRegistry.list_supported_types():
        candidates = FormatRegistry.candidates_for(file_type, config.sniff_unknown_types)
        names = ", ".join(kind.value for kind in candidates) or "raw"
        print(f"{file_type.label:<14} {names:<40}")
    return 0


# ==============================================================================
# MAIN ARGUMENT PARSER
# ==============================================================================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archive-indexer",
        description="Archive Indexer - incremental indexing of game asset archives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s index data.grf              Build or refresh the index
  %(prog)s tree data.grf --depth 2     Show the top of the category tree
  %(prog)s show data.grf 1234          Classify entry 1234
  %(prog)s cache-path data.grf         Where the index is stored
        """
    )
    parser.add_argument('--config', help='Configuration file to use')
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Hide the progress bar')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    index_parser = subparsers.add_parser('index', help='Load or build the index of an archive')
    index_parser.add_argument('archive', help='Archive file')
    index_parser.set_defaults(func=cmd_index)

    reindex_parser = subparsers.add_parser('reindex', help='Rebuild the index from scratch')
    reindex_parser.add_argument('archive', help='Archive file')
    reindex_parser.set_defaults(func=cmd_reindex)

    tree_parser = subparsers.add_parser('tree', help='Print the category tree')
    tree_parser.add_argument('archive', help='Archive file')
    tree_parser.add_argument('--depth', type=int, help='Maximum depth to print')
    tree_parser.add_argument('--entries', action='store_true', help='List entries too')
    tree_parser.set_defaults(func=cmd_tree)

    show_parser = subparsers.add_parser('show', help='Classify one entry')
    show_parser.add_argument('archive', help='Archive file')
    show_parser.add_argument('entry_id', type=int, help='Entry id')
    show_parser.set_defaults(func=cmd_show)

    cache_parser = subparsers.add_parser('cache-path', help='Print the index file location')
    cache_parser.add_argument('archive', help='Archive file')
    cache_parser.set_defaults(func=cmd_cache_path)

    formats_parser = subparsers.add_parser('formats', help='List supported types')
    formats_parser.set_defaults(func=cmd_formats)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        Colors.disable()
    elif sys.platform == 'win32':
        # Enable ANSI colors on Windows
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
        except (AttributeError, OSError):
            Colors.disable()

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
