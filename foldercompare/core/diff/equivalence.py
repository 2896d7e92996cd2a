"""
Content equivalence of two files.

Two comparison modes:
- BYTES: size check, then streamed hash digests
- LINES: decoded text compared line by line after normalization
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum, auto
from itertools import zip_longest
from pathlib import Path
from typing import Iterable, Iterator, Optional

from foldercompare.core.models import CompareOptions
from foldercompare.services.file_io import FileIOService, split_line_ending
from foldercompare.services.hashing import HashAlgorithm, HashingService


class ContentMode(Enum):
    """How file content is compared."""
    BYTES = auto()  # Raw bytes
    LINES = auto()  # Normalized text lines


@dataclass(frozen=True)
class LineNormalizer:
    """Normalizes text lines before they are compared."""
    ignore_line_ending: bool = False
    ignore_white_spaces: bool = False
    ignore_all_white_spaces: bool = False
    ignore_empty_lines: bool = False

    @classmethod
    def from_options(cls, options: CompareOptions) -> 'LineNormalizer':
        return cls(
            ignore_line_ending=options.ignore_line_ending,
            ignore_white_spaces=options.ignore_white_spaces,
            ignore_all_white_spaces=options.ignore_all_white_spaces,
            ignore_empty_lines=options.ignore_empty_lines,
        )

    def normalize_line(self, line: str) -> Optional[str]:
        """
        Normalize a line according to options.

        Returns None when the line must be skipped.
        """
        body, terminator = split_line_ending(line)

        # Handle line endings
        if self.ignore_line_ending:
            terminator = ''

        # Handle whitespace
        if self.ignore_all_white_spaces:
            body = ''.join(body.split())
        elif self.ignore_white_spaces:
            body = body.strip()

        if self.ignore_empty_lines and not body.strip():
            return None

        return body + terminator

    def normalize(self, lines: Iterable[str]) -> Iterator[str]:
        """Lazily normalize a sequence of lines, dropping skipped ones."""
        for line in lines:
            normalized = self.normalize_line(line)
            if normalized is not None:
                yield normalized


# Marks the end of the shorter sequence in zip_longest
_MISSING = object()


def lines_equivalent(
    left: Iterable[str],
    right: Iterable[str],
    normalizer: LineNormalizer
) -> bool:
    """Compare two line sequences, stopping at the first difference."""
    pairs = zip_longest(normalizer.normalize(left), normalizer.normalize(right), fillvalue=_MISSING)
    for left_line, right_line in pairs:
        if left_line != right_line:
            return False
    return True


class ContentEquivalence:
    """
    Decides whether two files hold equivalent content.

    The mode is LINES when any normalization option is set, BYTES
    otherwise. BYTES mode compares sizes, then SHA-256 digests. In LINES
    mode both files are decoded losslessly with one shared encoding;
    files that look binary or fail to decode are compared as bytes.
    Unreadable files raise OSError.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        hashing: Optional[HashingService] = None,
        file_io: Optional[FileIOService] = None
    ):
        self.options = options or CompareOptions()
        self.mode = ContentMode.LINES if self.options.uses_line_comparison else ContentMode.BYTES
        self._normalizer = LineNormalizer.from_options(self.options)
        self._hashing = hashing or HashingService(HashAlgorithm.SHA256)
        self._file_io = file_io or FileIOService()

    async def equivalent(self, path_a: Path | str, path_b: Path | str) -> bool:
        """Check equivalence without blocking the event loop."""
        return await asyncio.to_thread(self.equivalent_sync, path_a, path_b)

    def equivalent_sync(self, path_a: Path | str, path_b: Path | str) -> bool:
        """
        Check equivalence in the calling thread.

        Raises:
            OSError: if either file cannot be read
        """
        path_a, path_b = Path(path_a), Path(path_b)

        if self.mode == ContentMode.LINES:
            if self._file_io.is_binary_file(path_a) or self._file_io.is_binary_file(path_b):
                logging.debug(f"ContentEquivalence - Binary content, comparing bytes: {path_a}")
            else:
                try:
                    return self._lines_equivalent(path_a, path_b)
                except UnicodeDecodeError as e:
                    logging.debug(f"ContentEquivalence - Cannot decode {e.encoding} text, comparing bytes: {path_a}")

        return self._hashing.compare_files_by_hash(path_a, path_b)

    def _lines_equivalent(self, path_a: Path, path_b: Path) -> bool:
        encoding = self._file_io.detect_shared_encoding(path_a, path_b)
        left = self._file_io.read_lines(path_a, encoding)
        right = self._file_io.read_lines(path_b, encoding)
        try:
            return lines_equivalent(left, right, self._normalizer)
        finally:
            # Release file handles when the comparison stopped early
            left.close()
            right.close()
