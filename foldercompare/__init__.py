"""
Folder comparison engine.

Compares two directory trees and classifies every file as:
- Distinct (present on both sides, content differs)
- Left only
- Right only
- Identical (reported on request)
"""

__version__ = "1.0.0"

from foldercompare.core.errors import (
    CompareCancelled,
    ConfigurationError,
    FilterSyntaxError,
)
from foldercompare.core.models import (
    CompareError,
    CompareOptions,
    CompareProgress,
    ComparisonResult,
    ErrorKind,
    ExtensionPair,
)
from foldercompare.core.folder.session import CompareSession, compare_folders

__all__ = [
    '__version__',
    # Errors
    'CompareCancelled',
    'ConfigurationError',
    'FilterSyntaxError',
    # Models
    'CompareError',
    'CompareOptions',
    'CompareProgress',
    'ComparisonResult',
    'ErrorKind',
    'ExtensionPair',
    # Session
    'CompareSession',
    'compare_folders',
]
