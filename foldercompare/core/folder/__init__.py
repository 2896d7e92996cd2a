"""
Folder comparison module.

Provides functionality for:
- Matching file names across two trees
- Walking two trees side by side with glob filtering
- Classifying walked entries into result partitions
- Running a full comparison session
"""

from foldercompare.core.folder.names import (
    NameMatcher,
    paired_by_extension,
    validate_extension_pairs,
)
from foldercompare.core.folder.scanner import (
    DirectoryLister,
    LocalDirectoryLister,
    PatternMatcher,
    TreeWalker,
)
from foldercompare.core.folder.classifier import Classifier
from foldercompare.core.folder.session import (
    CompareSession,
    compare_folders,
)

__all__ = [
    # Names
    'NameMatcher',
    'paired_by_extension',
    'validate_extension_pairs',
    # Scanner
    'DirectoryLister',
    'LocalDirectoryLister',
    'PatternMatcher',
    'TreeWalker',
    # Classifier
    'Classifier',
    # Session
    'CompareSession',
    'compare_folders',
]
