"""
Directory scanning for folder comparison.

Walks two directory trees side by side with:
- Pluggable directory listing (local disk by default)
- Pattern-based include/exclude filtering
- Name matching across the trees (case folding, extension pairs)
- Symlink loop protection
- Cooperative cancellation at directory boundaries
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import AsyncIterator, Iterable, Optional

from foldercompare.core.errors import CompareCancelled, FilterSyntaxError
from foldercompare.core.folder.names import NameMatcher
from foldercompare.core.models import (
    CandidatePair,
    CompareOptions,
    Entry,
    EntryKind,
    PairState,
)


def join_relative(parent: str, name: str) -> str:
    """Join a '/'-separated relative path and a base name."""
    return f"{parent}/{name}" if parent else name


class PatternMatcher:
    """
    Glob pattern matcher for relative paths.

    Supports:
    - * (matches any characters except /)
    - ** (matches any characters including /)
    - ? (matches single character)
    - [abc], [!abc] (character class)
    - ! prefix (negation, re-includes a path)
    - / prefix (anchored to root)
    - / suffix (directory only)

    A pattern without a leading / matches at any depth, so ``*.log``
    matches both ``a.log`` and ``logs/b.log``. Several patterns may be
    given in one string, separated by commas.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self._positive_patterns: list[tuple[re.Pattern, bool]] = []  # (regex, dir_only)
        self._negative_patterns: list[tuple[re.Pattern, bool]] = []
        self.patterns: tuple[str, ...] = tuple(self._split_patterns(patterns))

        for pattern in self.patterns:
            self._compile_pattern(pattern)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    @staticmethod
    def _split_patterns(patterns: Iterable[str]) -> Iterable[str]:
        for item in patterns:
            for pattern in item.split(','):
                pattern = pattern.strip()
                if not pattern:
                    raise FilterSyntaxError(item, "empty pattern")
                yield pattern

    def _compile_pattern(self, pattern: str) -> None:
        """Compile a glob pattern to regex."""
        original = pattern

        # Check for negation
        is_negative = pattern.startswith('!')
        if is_negative:
            pattern = pattern[1:]

        # Check for directory-only
        dir_only = pattern.endswith('/')
        if dir_only:
            pattern = pattern[:-1]

        # Check for anchored pattern
        anchored = pattern.startswith('/')
        if anchored:
            pattern = pattern[1:]

        if not pattern:
            raise FilterSyntaxError(original, "pattern matches no name")

        regex = self._pattern_to_regex(original, pattern, anchored)

        try:
            compiled = re.compile(regex)
        except re.error as e:
            raise FilterSyntaxError(original, str(e)) from e

        if is_negative:
            self._negative_patterns.append((compiled, dir_only))
        else:
            self._positive_patterns.append((compiled, dir_only))

    def _pattern_to_regex(self, original: str, pattern: str, anchored: bool) -> str:
        """Convert glob pattern to regex."""
        # Escape special regex characters except our wildcards
        special = '.^$+{}[]|()\\'
        result = []
        i = 0

        while i < len(pattern):
            c = pattern[i]

            if c == '*':
                if i + 1 < len(pattern) and pattern[i + 1] == '*':
                    # ** matches anything including /
                    if i + 2 < len(pattern) and pattern[i + 2] == '/':
                        result.append('(?:.*/)?')
                        i += 3
                        continue
                    else:
                        result.append('.*')
                        i += 2
                        continue
                else:
                    # * matches anything except /
                    result.append('[^/]*')
            elif c == '?':
                result.append('[^/]')
            elif c == '[':
                # Character class
                j = i + 1
                if j < len(pattern) and pattern[j] == '!':
                    result.append('[^')
                    j += 1
                else:
                    result.append('[')
                start = j
                while j < len(pattern) and pattern[j] != ']':
                    result.append('\\\\' if pattern[j] == '\\' else pattern[j])
                    j += 1
                if j >= len(pattern):
                    raise FilterSyntaxError(original, "unterminated character class")
                if j == start:
                    raise FilterSyntaxError(original, "empty character class")
                result.append(']')
                i = j
            elif c in special:
                result.append('\\' + c)
            else:
                result.append(c)

            i += 1

        regex = ''.join(result)

        if anchored:
            regex = '^' + regex
        else:
            regex = '(?:^|/)' + regex

        return regex + '$'

    def matches(self, path: str, is_dir: bool = False) -> bool:
        """
        Check if a relative path matches the patterns.

        Negated patterns re-include a path matched by a positive one.
        """
        # Normalize path
        path = path.replace(os.sep, '/')
        if path.startswith('/'):
            path = path[1:]

        matched = False

        for pattern, dir_only in self._positive_patterns:
            if dir_only and not is_dir:
                continue
            if pattern.search(path):
                matched = True
                break

        if not matched:
            return False

        for pattern, dir_only in self._negative_patterns:
            if dir_only and not is_dir:
                continue
            if pattern.search(path):
                return False

        return True


class DirectoryLister(ABC):
    """
    Capability used by the walker to read directories.

    The default implementation reads the local disk; tests and hosts
    with virtual filesystems provide their own.
    """

    @abstractmethod
    async def describe(self, path: Path) -> Entry:
        """
        Describe a root directory.

        Raises:
            FileNotFoundError: if the path does not exist
            NotADirectoryError: if the path is not a directory
        """

    @abstractmethod
    async def list_directory(self, directory: Entry) -> list[Entry]:
        """List the children of a directory, in a stable order."""


class LocalDirectoryLister(DirectoryLister):
    """
    Lists directories on the local disk.

    Blocking calls run in a worker thread. Children are sorted with
    directories first, then by name, for consistent ordering.
    """

    def __init__(self, follow_symlinks: bool = True):
        self.follow_symlinks = follow_symlinks

    async def describe(self, path: Path) -> Entry:
        return await asyncio.to_thread(self._describe, Path(path))

    async def list_directory(self, directory: Entry) -> list[Entry]:
        return await asyncio.to_thread(self._scan, directory)

    def _describe(self, path: Path) -> Entry:
        stat_result = path.stat()  # FileNotFoundError if missing
        if not path.is_dir():
            logging.error(f"LocalDirectoryLister - Root path is not a directory: {path}")
            raise NotADirectoryError(f"Not a directory: {path}")
        return Entry(
            path=path,
            name=path.name,
            kind=EntryKind.DIRECTORY,
            relative_path="",
            identity=(stat_result.st_dev, stat_result.st_ino),
        )

    def _scan(self, directory: Entry) -> list[Entry]:
        entries: list[Entry] = []

        with os.scandir(directory.path) as it:
            for item in it:
                identity = None
                if item.is_dir(follow_symlinks=self.follow_symlinks):
                    kind = EntryKind.DIRECTORY
                    stat_result = item.stat(follow_symlinks=self.follow_symlinks)
                    identity = (stat_result.st_dev, stat_result.st_ino)
                else:
                    kind = EntryKind.FILE

                entries.append(Entry(
                    path=Path(item.path),
                    name=item.name,
                    kind=kind,
                    relative_path=join_relative(directory.relative_path, item.name),
                    identity=identity,
                ))

        entries.sort(key=lambda e: (0 if e.is_directory else 1, e.name))
        return entries


class TreeWalker:
    """
    Walks two directory trees in lock-step.

    Yields a CandidatePair for every visible entry: matched pairs for
    entries found on both sides, one-sided pairs otherwise. Traversal is
    depth-first in listing order; right-only entries of a directory come
    after its left entries.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        lister: Optional[DirectoryLister] = None,
        name_matcher: Optional[NameMatcher] = None
    ):
        self.options = options or CompareOptions()
        self._lister = lister or LocalDirectoryLister()
        self._names = name_matcher or NameMatcher(self.options)
        self._include = PatternMatcher(self.options.include_filter)
        self._exclude = PatternMatcher(self.options.exclude_filter)
        self._cancelled = False

    def cancel(self) -> None:
        """Stop the walk at the next directory boundary."""
        self._cancelled = True

    def is_visible(self, entry: Entry) -> bool:
        """Check an entry against the include/exclude filters."""
        if self._exclude and self._exclude.matches(entry.relative_path, entry.is_directory):
            return False
        # Include filters select files; directories are always traversed
        if entry.is_file and self._include and not self._include.matches(entry.relative_path):
            return False
        return True

    async def walk(
        self,
        left_root: Path | str,
        right_root: Path | str
    ) -> AsyncIterator[CandidatePair]:
        """
        Walk both trees.

        Raises:
            CompareCancelled: if cancel() was called
            OSError: if a directory cannot be read
        """
        left, right = await asyncio.gather(
            self._lister.describe(Path(left_root)),
            self._lister.describe(Path(right_root)),
        )

        async for pair in self._walk_matched(left, right, (left.identity,), (right.identity,)):
            yield pair

    async def _list_visible(self, directory: Entry) -> list[Entry]:
        return [e for e in await self._lister.list_directory(directory) if self.is_visible(e)]

    async def _walk_matched(
        self,
        left_dir: Entry,
        right_dir: Entry,
        left_ancestors: tuple,
        right_ancestors: tuple
    ) -> AsyncIterator[CandidatePair]:
        self._check_cancelled(left_dir)

        left_entries, right_entries = await asyncio.gather(
            self._list_visible(left_dir),
            self._list_visible(right_dir),
        )

        unmatched = self._names.index(right_entries)

        for entry in left_entries:
            partner = unmatched.pop_match(entry)

            if partner is None:
                yield CandidatePair.left_only(entry)
                if entry.is_directory:
                    async for pair in self._walk_one_side(entry, PairState.LEFT_ONLY, left_ancestors):
                        yield pair
                continue

            yield CandidatePair.matched(entry, partner)

            if entry.is_directory:
                if self._is_loop(entry, left_ancestors) or self._is_loop(partner, right_ancestors):
                    continue
                async for pair in self._walk_matched(
                    entry, partner,
                    left_ancestors + (entry.identity,),
                    right_ancestors + (partner.identity,)
                ):
                    yield pair

        for entry in unmatched.remaining():
            yield CandidatePair.right_only(entry)
            if entry.is_directory:
                async for pair in self._walk_one_side(entry, PairState.RIGHT_ONLY, right_ancestors):
                    yield pair

    async def _walk_one_side(
        self,
        directory: Entry,
        state: PairState,
        ancestors: tuple
    ) -> AsyncIterator[CandidatePair]:
        """Walk a directory present on one side only."""
        if self._is_loop(directory, ancestors):
            return
        self._check_cancelled(directory)

        make_pair = CandidatePair.left_only if state == PairState.LEFT_ONLY else CandidatePair.right_only
        ancestors = ancestors + (directory.identity,)
        for entry in await self._list_visible(directory):
            yield make_pair(entry)
            if entry.is_directory:
                async for pair in self._walk_one_side(entry, state, ancestors):
                    yield pair

    def _is_loop(self, directory: Entry, ancestors: tuple) -> bool:
        if directory.identity is not None and directory.identity in ancestors:
            logging.warning(f"TreeWalker - Not following symlink loop at {directory.path}")
            return True
        return False

    def _check_cancelled(self, directory: Entry) -> None:
        if self._cancelled:
            logging.info(f"TreeWalker - Walk cancelled before {directory.path}")
            raise CompareCancelled(f"Comparison cancelled at {directory.path}")
