"""
Command line entry point for the folder comparison engine.

This module handles:
- Command line argument parsing
- Logging configuration
- Loading settings and merging command line overrides
- Printing the comparison result
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from foldercompare import __version__
from foldercompare.core.errors import ConfigurationError
from foldercompare.core.folder.session import CompareSession
from foldercompare.core.models import CompareOptions, ComparisonResult
from foldercompare.services.hashing import HashAlgorithm
from foldercompare.services.settings import SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "foldercompare"

EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    The console handler writes to stderr so that the comparison output
    on stdout stays machine readable.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    # Get numeric level
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    # Create root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Reduce noise from third-party libraries
    logging.getLogger('chardet').setLevel(logging.WARNING)

    return root_logger


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compare two folders and list the files that differ",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s left/ right/                           Compare two folders
  %(prog)s left/ right/ --ignore-white-spaces     Ignore leading/trailing whitespace
  %(prog)s src/ out/ --ignore-extension js ts     Match index.js with index.ts
  %(prog)s a/ b/ --exclude node_modules --exclude "*.log"

Exit status is 0 when the folders compare equal, 1 when they differ
and 2 when the comparison failed.
        """
    )

    # Positional arguments
    parser.add_argument('left', help='Left folder to compare')
    parser.add_argument('right', help='Right folder to compare')

    # Content comparison
    content = parser.add_argument_group('content comparison')
    content.add_argument(
        '--no-content',
        dest='compare_content',
        action='store_false',
        default=None,
        help='Only compare file names, never file content'
    )
    content.add_argument(
        '--ignore-line-ending',
        action='store_true',
        default=None,
        help='Treat CRLF, CR and LF line endings as equal'
    )
    content.add_argument(
        '--ignore-white-spaces',
        action='store_true',
        default=None,
        help='Ignore leading and trailing whitespace of each line'
    )
    content.add_argument(
        '--ignore-all-white-spaces',
        action='store_true',
        default=None,
        help='Ignore every whitespace character'
    )
    content.add_argument(
        '--ignore-empty-lines',
        action='store_true',
        default=None,
        help='Ignore blank lines'
    )
    content.add_argument(
        '--hash',
        choices=[algorithm.name.lower() for algorithm in HashAlgorithm],
        default=HashAlgorithm.SHA256.name.lower(),
        help='Digest used to compare raw content (xxh64 is faster but not collision resistant)'
    )

    # Name matching
    names = parser.add_argument_group('name matching')
    names.add_argument(
        '--case-sensitive',
        dest='ignore_file_name_case',
        action='store_false',
        default=None,
        help='Match file names case-sensitively'
    )
    names.add_argument(
        '--ignore-extension',
        nargs=2,
        action='append',
        metavar=('EXT', 'OTHER'),
        help='Treat two extensions as the same file (repeatable)'
    )

    # Filtering
    filters = parser.add_argument_group('filtering')
    filters.add_argument(
        '--include',
        action='append',
        metavar='PATTERN',
        help='Only compare files matching the glob pattern (repeatable)'
    )
    filters.add_argument(
        '--exclude',
        action='append',
        metavar='PATTERN',
        help='Skip files and folders matching the glob pattern (repeatable)'
    )

    # Output
    parser.add_argument(
        '--show-identical',
        action='store_true',
        default=None,
        help='Also list identical files'
    )

    # Configuration
    parser.add_argument(
        '-s', '--settings',
        type=Path,
        help='Settings file path (JSON)'
    )

    # Logging
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        type=Path,
        help='Also write the log to this file'
    )

    # Version
    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {__version__}'
    )

    return parser


def build_options(args: argparse.Namespace) -> CompareOptions:
    """
    Merge the settings file with command line overrides.

    Raises:
        ConfigurationError: if the settings file or an override is invalid
    """
    base = SettingsManager(args.settings).load() if args.settings else CompareOptions()
    data = base.to_mapping()

    overrides = {
        'compareContent': args.compare_content,
        'ignoreLineEnding': args.ignore_line_ending,
        'ignoreWhiteSpaces': args.ignore_white_spaces,
        'ignoreAllWhiteSpaces': args.ignore_all_white_spaces,
        'ignoreEmptyLines': args.ignore_empty_lines,
        'ignoreFileNameCase': args.ignore_file_name_case,
        'ignoreExtension': args.ignore_extension,
        'includeFilter': args.include,
        'excludeFilter': args.exclude,
        'showIdentical': args.show_identical,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})

    return CompareOptions.from_mapping(data)


# =============================================================================
# Output
# =============================================================================

def print_result(result: ComparisonResult, stream: Optional[TextIO] = None) -> None:
    """
    Print a result, one file per line.

    Markers: ``M`` distinct, ``<`` left only, ``>`` right only,
    ``=`` identical. Paths are relative to their root.
    """
    for left, _right in result.distinct:
        print(f"M {result.relative_path(left)}", file=stream)
    for path in result.left_only:
        print(f"< {result.relative_path(path)}", file=stream)
    for path in result.right_only:
        print(f"> {result.relative_path(path)}", file=stream)
    for left, _right in result.identical:
        print(f"= {result.relative_path(left)}", file=stream)


# =============================================================================
# Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line main entry point.

    Returns:
        Exit code (0 identical, 1 different, 2 error)
    """
    args = build_parser().parse_args(argv)

    logger = setup_logging(args.log_level, args.log_file)
    logger.debug(f"Starting {APP_NAME} v{__version__}")

    try:
        options = build_options(args)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"{APP_NAME}: {e}", file=sys.stderr)
        return EXIT_ERROR

    session = CompareSession(options, hash_algorithm=HashAlgorithm[args.hash.upper()])
    result = session.run_sync(args.left, args.right)

    if result.error is not None:
        print(f"{APP_NAME}: {result.error}", file=sys.stderr)
        return EXIT_ERROR

    print_result(result)
    logger.info(result.summary)

    return EXIT_IDENTICAL if result.is_identical else EXIT_DIFFERENT


if __name__ == '__main__':
    sys.exit(main())
