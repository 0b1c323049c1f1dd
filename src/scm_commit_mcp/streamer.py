"""Chunked, filtered traversal of a commit source."""

import logging
from dataclasses import dataclass
from typing import Callable

from .commit_source import Commit, CommitSource

logger = logging.getLogger(__name__)

# How many raw commits to fetch at once
DEFAULT_CHUNK_SIZE = 20


@dataclass(frozen=True)
class FilterResult:
    """Matches of one filtered traversal.

    `exhausted` is only true when the source signalled the end of history
    (an empty or short page); it does not mean that the limit was missed.
    """

    matches: tuple[Commit, ...]
    total_searched: int
    exhausted: bool
    overall_count: int


class CommitStreamer:
    """Pulls fixed-size pages from a source until enough commits matched."""

    def __init__(self, source: CommitSource, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk size must be positive, got {chunk_size}")
        self.source = source
        self.chunk_size = chunk_size

    def fetch_filtered(self, predicate: Callable[[Commit], bool], limit: int) -> FilterResult:
        """
        Collect up to `limit` commits accepted by `predicate`, in source order.

        Args:
            predicate: Called once per examined commit
            limit: Maximum number of matches, at least 1

        Raises:
            CommitSourceError: Propagated unchanged from the source
        """
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        matches: list[Commit] = []
        start = 0
        total_searched = 0
        overall_count = -1
        exhausted = False

        while len(matches) < limit and not exhausted:
            page = self.source.fetch_page(start, self.chunk_size)
            if overall_count < 0:
                overall_count = page.total

            if not page.commits:
                exhausted = True
                break

            for commit in page.commits:
                total_searched += 1
                if predicate(commit):
                    matches.append(commit)
                if len(matches) >= limit:
                    break

            start += len(page.commits)

            if len(page.commits) < self.chunk_size:
                exhausted = True

        logger.debug(
            f"searched {total_searched} commits, {len(matches)} matches, exhausted={exhausted}"
        )
        return FilterResult(tuple(matches), total_searched, exhausted, overall_count)
