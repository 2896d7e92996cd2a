"""
Diff module for file content comparison.

Provides the content equivalence check used by folder comparison:
- Raw byte comparison (hash digests)
- Line comparison with whitespace and line ending normalization
"""

from foldercompare.core.diff.equivalence import (
    ContentEquivalence,
    ContentMode,
    LineNormalizer,
    lines_equivalent,
)

__all__ = [
    'ContentEquivalence',
    'ContentMode',
    'LineNormalizer',
    'lines_equivalent',
]
