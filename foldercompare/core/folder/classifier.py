"""
Classification of walked candidate pairs into comparison partitions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterable, AsyncIterator, Iterable, Optional, Union

from foldercompare.core.diff.equivalence import ContentEquivalence
from foldercompare.core.models import (
    CandidatePair,
    CompareOptions,
    ComparisonResult,
    PairState,
)


Candidates = Union[AsyncIterable[CandidatePair], Iterable[CandidatePair]]


async def _iterate(candidates: Candidates) -> AsyncIterator[CandidatePair]:
    if hasattr(candidates, '__aiter__'):
        async for pair in candidates:
            yield pair
    else:
        for pair in candidates:
            yield pair


class Classifier:
    """
    Sorts candidate pairs into distinct, left-only, right-only and
    identical files.

    Directory pairs are skipped. Matched file pairs are content-checked
    concurrently, at most ``max_concurrency`` at a time, while the walk
    goes on; every partition keeps the order in which pairs arrived.
    """

    def __init__(
        self,
        options: Optional[CompareOptions] = None,
        equivalence: Optional[ContentEquivalence] = None,
        max_concurrency: int = 8
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
        self.options = options or CompareOptions()
        self._equivalence = equivalence or ContentEquivalence(self.options)
        self._max_concurrency = max_concurrency

    async def classify(
        self,
        candidates: Candidates,
        left_root: str = "",
        right_root: str = ""
    ) -> ComparisonResult:
        """
        Build a result from a stream of candidate pairs.

        Raises:
            OSError: if a file cannot be read during a content check
            CompareCancelled: if the candidate stream was cancelled
        """
        left_only: list[str] = []
        right_only: list[str] = []
        matched: list[tuple[str, str]] = []
        checks: list[asyncio.Task] = []

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def check(left: str, right: str) -> bool:
            async with semaphore:
                return await self._equivalence.equivalent(left, right)

        try:
            async for pair in _iterate(candidates):
                if pair.is_directory:
                    continue

                if pair.state == PairState.LEFT_ONLY:
                    left_only.append(str(pair.left.path))
                elif pair.state == PairState.RIGHT_ONLY:
                    right_only.append(str(pair.right.path))
                else:
                    paths = (str(pair.left.path), str(pair.right.path))
                    matched.append(paths)
                    if self.options.compare_content:
                        checks.append(asyncio.create_task(check(*paths)))

            outcomes = await asyncio.gather(*checks)
        except BaseException:
            for task in checks:
                task.cancel()
            await asyncio.gather(*checks, return_exceptions=True)
            raise

        if not self.options.compare_content:
            outcomes = [True] * len(matched)

        distinct = tuple(paths for paths, same in zip(matched, outcomes) if not same)
        identical = ()
        if self.options.show_identical:
            identical = tuple(paths for paths, same in zip(matched, outcomes) if same)

        logging.debug(f"Classifier - {len(matched)} matched files, {len(distinct)} distinct")

        return ComparisonResult(
            distinct=distinct,
            left_only=tuple(left_only),
            right_only=tuple(right_only),
            identical=identical,
            left_root=left_root,
            right_root=right_root,
        )
