"""
Core data models for the folder comparison engine.

This module defines the data structures shared by every component:
- Comparison options and extension pairs
- Directory entries and candidate pairs produced by the tree walk
- The classified comparison result
- Error and progress records reported to the host

All models are:
- UI-agnostic (the host renders results however it wants)
- Immutable (frozen dataclasses holding tuples)
- Type-hinted for IDE support
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any, Mapping, Optional

from foldercompare.core.errors import ConfigurationError


# Prefix used by the host application for its settings keys.
SETTINGS_PREFIX = "compareFolders."


# =============================================================================
# Enumerations
# =============================================================================

class EntryKind(Enum):
    """Kind of filesystem entry."""
    FILE = auto()
    DIRECTORY = auto()


class PairState(Enum):
    """Where an entry was found."""
    MATCHED = auto()     # Present on both sides
    LEFT_ONLY = auto()   # Present only under the left root
    RIGHT_ONLY = auto()  # Present only under the right root


class ErrorKind(Enum):
    """Category of an error reported by a comparison run."""
    CONFIGURATION = auto()
    FILTER_SYNTAX = auto()
    IO = auto()
    CANCELLED = auto()
    UNEXPECTED = auto()


# =============================================================================
# Options Models
# =============================================================================

def _strip_dot(extension: str) -> str:
    return extension[1:] if extension.startswith('.') else extension


@dataclass(frozen=True)
class ExtensionPair:
    """
    Two file extensions that name the same logical file.

    The pair is unordered: ``ExtensionPair('js', 'ts')`` and
    ``ExtensionPair('ts', 'js')`` declare the same equivalence.
    Extensions are stored without their leading dot.
    """
    first: str
    second: str

    def __post_init__(self):
        for value in (self.first, self.second):
            if not isinstance(value, str):
                raise ConfigurationError(
                    f"Extension must be a string, got {type(value).__name__}"
                )
        first = _strip_dot(self.first.strip())
        second = _strip_dot(self.second.strip())
        if not first or not second:
            raise ConfigurationError(
                f"Extension pair [{self.first!r}, {self.second!r}] contains an empty extension"
            )
        object.__setattr__(self, 'first', first)
        object.__setattr__(self, 'second', second)

    @property
    def extensions(self) -> tuple[str, str]:
        return (self.first, self.second)

    def contains(self, extension: str) -> bool:
        return _strip_dot(extension) in self.extensions

    def partner_of(self, extension: str) -> Optional[str]:
        """Get the other extension of the pair, or None if not a member."""
        extension = _strip_dot(extension)
        if extension == self.first:
            return self.second
        if extension == self.second:
            return self.first
        return None

    @classmethod
    def from_value(cls, value: Any) -> 'ExtensionPair':
        """Build a pair from a host value such as ``["js", "ts"]``."""
        if isinstance(value, ExtensionPair):
            return value
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(value[0], value[1])
        raise ConfigurationError(
            f"Extension pair must hold exactly two extensions, got {value!r}"
        )

    def to_value(self) -> list[str]:
        return [self.first, self.second]


def _read_bool(key: str, value: Any, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Option '{key}' must be a boolean, got {type(value).__name__}"
        )
    return value


def _read_patterns(key: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(
            f"Option '{key}' must be an array of glob patterns, got {type(value).__name__}"
        )
    for item in value:
        if not isinstance(item, str):
            raise ConfigurationError(
                f"Option '{key}' must only hold strings, got {item!r}"
            )
    return tuple(value)


def _read_pairs(key: str, value: Any) -> tuple[ExtensionPair, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(
            f"Option '{key}' must be an array of extension pairs, got {type(value).__name__}"
        )
    return tuple(ExtensionPair.from_value(item) for item in value)


@dataclass(frozen=True)
class CompareOptions:
    """
    Immutable snapshot of the options for one comparison run.

    Every field has a default; array fields are tuples and are never None.
    """
    # Content comparison
    compare_content: bool = True
    ignore_line_ending: bool = False
    ignore_white_spaces: bool = False       # Trim both ends of each line
    ignore_all_white_spaces: bool = False   # Drop every whitespace character
    ignore_empty_lines: bool = False

    # Name matching
    ignore_file_name_case: bool = True
    ignore_extension: tuple[ExtensionPair, ...] = ()

    # Filtering (glob patterns on paths relative to each root)
    include_filter: tuple[str, ...] = ()
    exclude_filter: tuple[str, ...] = ()

    # Output
    show_identical: bool = False

    def __post_init__(self):
        # Hosts hand over lists; keep the snapshot hashable and immutable.
        object.__setattr__(self, 'ignore_extension',
                           tuple(ExtensionPair.from_value(p) for p in self.ignore_extension or ()))
        object.__setattr__(self, 'include_filter', tuple(self.include_filter or ()))
        object.__setattr__(self, 'exclude_filter', tuple(self.exclude_filter or ()))

    @property
    def uses_line_comparison(self) -> bool:
        """True when content must be compared line by line after normalization."""
        return (self.ignore_line_ending or self.ignore_white_spaces
                or self.ignore_all_white_spaces or self.ignore_empty_lines)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'CompareOptions':
        """
        Build options from a host settings mapping.

        Keys may be given as ``compareContent`` or ``compareFolders.compareContent``.
        Unknown keys are ignored; missing or null values take their default.

        Raises:
            ConfigurationError: if a recognized key holds a value of the wrong type
        """
        values: dict[str, Any] = {}
        for key, value in data.items():
            if key.startswith(SETTINGS_PREFIX):
                key = key[len(SETTINGS_PREFIX):]
            values[key] = value

        defaults = cls()
        return cls(
            compare_content=_read_bool(
                'compareContent', values.get('compareContent'), defaults.compare_content),
            ignore_line_ending=_read_bool(
                'ignoreLineEnding', values.get('ignoreLineEnding'), defaults.ignore_line_ending),
            ignore_white_spaces=_read_bool(
                'ignoreWhiteSpaces', values.get('ignoreWhiteSpaces'), defaults.ignore_white_spaces),
            ignore_all_white_spaces=_read_bool(
                'ignoreAllWhiteSpaces', values.get('ignoreAllWhiteSpaces'),
                defaults.ignore_all_white_spaces),
            ignore_empty_lines=_read_bool(
                'ignoreEmptyLines', values.get('ignoreEmptyLines'), defaults.ignore_empty_lines),
            ignore_file_name_case=_read_bool(
                'ignoreFileNameCase', values.get('ignoreFileNameCase'),
                defaults.ignore_file_name_case),
            ignore_extension=_read_pairs('ignoreExtension', values.get('ignoreExtension')),
            include_filter=_read_patterns('includeFilter', values.get('includeFilter')),
            exclude_filter=_read_patterns('excludeFilter', values.get('excludeFilter')),
            show_identical=_read_bool(
                'showIdentical', values.get('showIdentical'), defaults.show_identical),
        )

    def to_mapping(self) -> dict[str, Any]:
        """Convert to a host settings mapping (unprefixed keys)."""
        return {
            'compareContent': self.compare_content,
            'ignoreLineEnding': self.ignore_line_ending,
            'ignoreWhiteSpaces': self.ignore_white_spaces,
            'ignoreAllWhiteSpaces': self.ignore_all_white_spaces,
            'ignoreEmptyLines': self.ignore_empty_lines,
            'ignoreFileNameCase': self.ignore_file_name_case,
            'ignoreExtension': [pair.to_value() for pair in self.ignore_extension],
            'includeFilter': list(self.include_filter),
            'excludeFilter': list(self.exclude_filter),
            'showIdentical': self.show_identical,
        }


# =============================================================================
# Folder Comparison Models
# =============================================================================

@dataclass(frozen=True)
class Entry:
    """A file or directory found under one of the compared roots."""
    path: Path            # Absolute path
    name: str             # Base name
    kind: EntryKind
    relative_path: str    # Relative to the root, '/'-separated
    identity: Optional[tuple[int, int]] = None  # (st_dev, st_ino) when known

    @property
    def parent(self) -> Path:
        return self.path.parent

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


@dataclass(frozen=True)
class CandidatePair:
    """
    Entries that occupy the same logical position in both trees.

    A matched pair carries both entries; a one-sided pair carries one.
    """
    state: PairState
    left: Optional[Entry] = None
    right: Optional[Entry] = None

    @classmethod
    def matched(cls, left: Entry, right: Entry) -> 'CandidatePair':
        return cls(PairState.MATCHED, left, right)

    @classmethod
    def left_only(cls, left: Entry) -> 'CandidatePair':
        return cls(PairState.LEFT_ONLY, left, None)

    @classmethod
    def right_only(cls, right: Entry) -> 'CandidatePair':
        return cls(PairState.RIGHT_ONLY, None, right)

    @property
    def entry(self) -> Entry:
        """The left entry if present, else the right one."""
        return self.left if self.left is not None else self.right

    @property
    def kind(self) -> EntryKind:
        return self.entry.kind

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def relative_path(self) -> str:
        return self.entry.relative_path


@dataclass(frozen=True)
class ComparisonResult:
    """
    Classified result of one comparison run.

    Every compared file lands in exactly one partition. ``identical`` is
    only filled when the run was asked to show identical files.
    """
    distinct: tuple[tuple[str, str], ...] = ()
    left_only: tuple[str, ...] = ()
    right_only: tuple[str, ...] = ()
    identical: tuple[tuple[str, str], ...] = ()
    left_root: str = ""
    right_root: str = ""
    error: Optional['CompareError'] = None

    @classmethod
    def empty(
        cls,
        left_root: str = "",
        right_root: str = "",
        error: Optional['CompareError'] = None
    ) -> 'ComparisonResult':
        """Create a result with no entries, optionally carrying an error."""
        return cls(left_root=left_root, right_root=right_root, error=error)

    def has_result(self) -> bool:
        """Check if there is anything to show besides identical files."""
        return bool(self.distinct or self.left_only or self.right_only)

    @property
    def total_differences(self) -> int:
        return len(self.distinct) + len(self.left_only) + len(self.right_only)

    @property
    def is_identical(self) -> bool:
        """Check if the folders compared equal (and the run succeeded)."""
        return self.error is None and self.total_differences == 0

    @property
    def summary(self) -> str:
        """Get a summary string."""
        return (f"Distinct: {len(self.distinct)}, Left only: {len(self.left_only)}, "
                f"Right only: {len(self.right_only)}, Identical: {len(self.identical)}")

    def swapped(self) -> 'ComparisonResult':
        """Return the same result seen from the other side."""
        return ComparisonResult(
            distinct=tuple((right, left) for left, right in self.distinct),
            left_only=self.right_only,
            right_only=self.left_only,
            identical=tuple((right, left) for left, right in self.identical),
            left_root=self.right_root,
            right_root=self.left_root,
            error=self.error,
        )

    def relative_path(self, path: str) -> str:
        """Get a result path relative to whichever root contains it."""
        for root in (self.left_root, self.right_root):
            if root and (path == root or path.startswith(root.rstrip(os.sep) + os.sep)):
                return os.path.relpath(path, root)
        return path


@dataclass(frozen=True)
class CompareProgress:
    """Progress of a comparison run."""
    phase: str  # 'walking', 'comparing'
    current_path: str
    items_processed: int


# =============================================================================
# Error Models
# =============================================================================

@dataclass(frozen=True)
class CompareError:
    """Error reported by a comparison run."""
    kind: ErrorKind
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.kind.name}: {self.path} - {self.message}"
        return f"{self.kind.name}: {self.message}"
