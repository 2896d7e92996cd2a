"""
Folder comparison session.

Runs one comparison from start to finish:
- Validates the options before touching the filesystem
- Walks both trees and classifies what it finds
- Turns every failure into an empty result carrying the error
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Mapping, Optional, Union

from foldercompare.core.diff.equivalence import ContentEquivalence
from foldercompare.core.errors import CompareCancelled, ConfigurationError, FilterSyntaxError
from foldercompare.core.folder.classifier import Classifier
from foldercompare.core.folder.names import NameMatcher
from foldercompare.core.folder.scanner import DirectoryLister, TreeWalker
from foldercompare.core.models import (
    CandidatePair,
    CompareError,
    CompareOptions,
    CompareProgress,
    ComparisonResult,
    ErrorKind,
)
from foldercompare.services.hashing import HashAlgorithm, HashingService


OptionsLike = Union[CompareOptions, Mapping[str, Any], None]


def normalize_root(path: Path | str) -> str:
    """Make a root path absolute and normalized."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


class CompareSession:
    """
    Compares two folders with one set of options.

    A session can be run several times; each run reads the filesystem
    afresh. cancel() stops the active run at the next directory boundary.
    """

    def __init__(
        self,
        options: OptionsLike = None,
        lister: Optional[DirectoryLister] = None,
        error_callback: Optional[Callable[[CompareError], None]] = None,
        progress_callback: Optional[Callable[[CompareProgress], None]] = None,
        max_concurrency: int = 8,
        hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256
    ):
        self._options = options
        self._lister = lister
        self._error_callback = error_callback
        self._progress_callback = progress_callback
        self._max_concurrency = max_concurrency
        self._hash_algorithm = hash_algorithm
        self._walker: Optional[TreeWalker] = None

    def cancel(self) -> None:
        """Cancel the running comparison."""
        if self._walker is not None:
            self._walker.cancel()

    async def run(self, left_root: Path | str, right_root: Path | str) -> ComparisonResult:
        """
        Compare two folders.

        Args:
            left_root: Left directory
            right_root: Right directory

        Returns:
            ComparisonResult; on failure an empty result whose ``error``
            describes what went wrong
        """
        start_time = time.time()

        left = normalize_root(left_root)
        right = normalize_root(right_root)

        try:
            walker, classifier = self._prepare()
        except FilterSyntaxError as e:
            return self._fail(ErrorKind.FILTER_SYNTAX, str(e), left, right)
        except ConfigurationError as e:
            return self._fail(ErrorKind.CONFIGURATION, str(e), left, right)

        logging.info(f"CompareSession - Comparing {left} with {right}")

        self._walker = walker

        try:
            result = await classifier.classify(self._track(walker.walk(left, right)), left, right)
        except CompareCancelled as e:
            return self._fail(ErrorKind.CANCELLED, str(e), left, right)
        except OSError as e:
            path = os.fspath(e.filename) if e.filename is not None else None
            return self._fail(ErrorKind.IO, e.strerror or str(e), left, right, path=path)
        except Exception as e:
            logging.exception(f"CompareSession - Unexpected error comparing {left} with {right}")
            return self._fail(ErrorKind.UNEXPECTED, str(e) or type(e).__name__, left, right)
        finally:
            self._walker = None

        logging.info(
            f"CompareSession - Done in {time.time() - start_time:.2f}s. {result.summary}"
        )
        return result

    def run_sync(self, left_root: Path | str, right_root: Path | str) -> ComparisonResult:
        """Run the comparison for callers without an event loop."""
        return asyncio.run(self.run(left_root, right_root))

    def _prepare(self) -> tuple[TreeWalker, Classifier]:
        """
        Build the walker and classifier for one run.

        Raises:
            ConfigurationError: if the options are invalid
        """
        options = self._options
        if options is None:
            options = CompareOptions()
        elif not isinstance(options, CompareOptions):
            options = CompareOptions.from_mapping(options)

        walker = TreeWalker(options, self._lister, NameMatcher(options))
        equivalence = ContentEquivalence(options, HashingService(self._hash_algorithm))
        classifier = Classifier(options, equivalence, self._max_concurrency)
        return walker, classifier

    async def _track(self, pairs: AsyncIterator[CandidatePair]) -> AsyncIterator[CandidatePair]:
        """Report progress for every walked pair."""
        processed = 0
        async for pair in pairs:
            processed += 1
            if self._progress_callback:
                self._progress_callback(CompareProgress(
                    phase='walking',
                    current_path=pair.relative_path,
                    items_processed=processed,
                ))
            yield pair

    def _fail(
        self,
        kind: ErrorKind,
        message: str,
        left: str,
        right: str,
        path: Optional[str] = None
    ) -> ComparisonResult:
        error = CompareError(kind=kind, message=message, path=path)
        if kind == ErrorKind.CANCELLED:
            logging.info(f"CompareSession - {error}")
        else:
            logging.error(f"CompareSession - {error}")

        if self._error_callback:
            self._error_callback(error)

        return ComparisonResult.empty(left, right, error)


def compare_folders(
    left_root: Path | str,
    right_root: Path | str,
    options: OptionsLike = None,
    **kwargs
) -> ComparisonResult:
    """Compare two folders synchronously with a one-off session."""
    return CompareSession(options, **kwargs).run_sync(left_root, right_root)
