"""
File name matching for folder comparison.

Decides whether two names found at the same tree level refer to the
same logical file, given case folding and extension equivalence rules.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from pathlib import Path
from typing import Iterable, Optional

from foldercompare.core.errors import ConfigurationError
from foldercompare.core.models import CompareOptions, Entry, ExtensionPair


def _fold(value: str, ignore_case: bool) -> str:
    return value.lower() if ignore_case else value


def _split_name(name: str) -> tuple[str, str]:
    """Split a base name into (stem, extension without dot)."""
    stem, extension = os.path.splitext(name)
    return stem, extension[1:]


def validate_extension_pairs(
    pairs: Iterable[ExtensionPair],
    ignore_case: bool = True
) -> dict[str, str]:
    """
    Check that every extension appears in at most one pair.

    Args:
        pairs: Declared extension pairs
        ignore_case: Fold extensions before comparing them

    Returns:
        Mapping of each (folded) extension to its partner

    Raises:
        ConfigurationError: if an extension is declared twice
    """
    partners: dict[str, str] = {}
    for pair in pairs:
        first = _fold(pair.first, ignore_case)
        second = _fold(pair.second, ignore_case)
        for extension in (first, second):
            if extension in partners:
                raise ConfigurationError(
                    f"Extension '{extension}' appears in more than one ignoreExtension pair"
                )
        if first == second:
            raise ConfigurationError(
                f"Extension '{first}' is paired with itself in ignoreExtension"
            )
        partners[first] = second
        partners[second] = first
    return partners


class NameMatcher:
    """
    Matches file and folder names across the two trees.

    Names match when they are equal after optional case folding, or when
    their stems are equal and their extensions form a declared pair.
    The relation is symmetric.
    """

    def __init__(self, options: Optional[CompareOptions] = None):
        self.options = options or CompareOptions()
        self._ignore_case = self.options.ignore_file_name_case
        self._partners = validate_extension_pairs(
            self.options.ignore_extension, self._ignore_case
        )

    def matches(self, name_a: str, name_b: str) -> bool:
        """Check if two base names refer to the same logical file."""
        folded_a = _fold(name_a, self._ignore_case)
        folded_b = _fold(name_b, self._ignore_case)

        if folded_a == folded_b:
            return True
        if not self._partners:
            return False

        stem_a, extension_a = _split_name(folded_a)
        stem_b, extension_b = _split_name(folded_b)
        if stem_a != stem_b:
            return False

        return extension_a == extension_b or self._partners.get(extension_a) == extension_b

    def matches_entry(self, left: Entry, right: Entry) -> bool:
        """Check if two entries match. A file never matches a directory."""
        if left.kind != right.kind:
            return False
        return self.matches(left.name, right.name)

    def first_match(self, entry: Entry, candidates: Iterable[Entry]) -> Optional[Entry]:
        """Return the first candidate matching ``entry``, in iteration order."""
        for candidate in candidates:
            if self.matches_entry(entry, candidate):
                return candidate
        return None

    def index(self, candidates: Iterable[Entry]) -> 'NameIndex':
        """Index candidates for repeated first-match lookups."""
        return NameIndex(self, candidates)

    def _keys(self, entry: Entry, with_partner: bool) -> list[tuple]:
        # A name key covers equal folded names; stem keys cover extension pairs.
        folded = _fold(entry.name, self._ignore_case)
        keys = [('name', entry.kind, folded)]
        if self._partners:
            stem, extension = _split_name(folded)
            keys.append(('stem', entry.kind, stem, extension))
            partner = self._partners.get(extension)
            if with_partner and partner is not None:
                keys.append(('stem', entry.kind, stem, partner))
        return keys


class NameIndex:
    """
    Candidates of one directory level, keyed by folded name.

    ``pop_match`` gives the same answer as ``NameMatcher.first_match`` over
    the candidates not yet taken, without scanning them all.
    """

    def __init__(self, matcher: NameMatcher, candidates: Iterable[Entry]):
        self._matcher = matcher
        self._entries = list(candidates)
        self._taken = [False] * len(self._entries)
        self._buckets: dict[tuple, deque[int]] = {}

        for position, entry in enumerate(self._entries):
            for key in matcher._keys(entry, with_partner=False):
                self._buckets.setdefault(key, deque()).append(position)

    def pop_match(self, entry: Entry) -> Optional[Entry]:
        """Take the first candidate (in listing order) matching ``entry``."""
        best = None
        for key in self._matcher._keys(entry, with_partner=True):
            bucket = self._buckets.get(key)
            if not bucket:
                continue
            while bucket and self._taken[bucket[0]]:
                bucket.popleft()
            if bucket and (best is None or bucket[0] < best):
                best = bucket[0]

        if best is None:
            return None
        self._taken[best] = True
        return self._entries[best]

    def remaining(self) -> list[Entry]:
        """Candidates not taken yet, in listing order."""
        return [entry for entry, taken in zip(self._entries, self._taken) if not taken]


def paired_by_extension(
    left_path: Path | str,
    right_path: Path | str,
    options: CompareOptions
) -> bool:
    """
    Check if two matched files only line up because of an extension pair.

    Hosts use this to show full paths in a diff title when the two
    sides carry different names (``index.js`` against ``index.ts``).
    """
    if not options.ignore_extension:
        return False

    ignore_case = options.ignore_file_name_case
    left_stem, left_extension = _split_name(_fold(Path(left_path).name, ignore_case))
    right_stem, right_extension = _split_name(_fold(Path(right_path).name, ignore_case))
    if left_stem != right_stem or left_extension == right_extension:
        return False

    try:
        partners = validate_extension_pairs(options.ignore_extension, ignore_case)
    except ConfigurationError as e:
        logging.warning(f"NameMatcher - Ignoring invalid extension pairs: {e}")
        return False
    return partners.get(left_extension) == right_extension
