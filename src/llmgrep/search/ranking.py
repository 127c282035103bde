"""First pass: collect, score and sort files with a bounded retry."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from llmgrep.config import DEFAULT_IGNORE_PATHS, MAX_FILE_SIZE, MAX_SORT_ATTEMPTS
from llmgrep.models import Candidate
from llmgrep.search.scorer import RelevanceScorer
from llmgrep.utils.files import collect_files

LOGGER = logging.getLogger(__name__)


def sort_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Sort by descending score; ties keep their collection order."""
    return sorted(candidates, key=lambda candidate: candidate.score, reverse=True)


class Ranker:
    """Runs collect+score until some file scores above zero.

    An empty directory ends the search immediately. An all-zero reply is
    treated as an oracle hiccup and the whole cycle is repeated, up to
    ``max_attempts`` times, after which no candidates are returned.
    """

    def __init__(
        self,
        scorer: RelevanceScorer,
        *,
        ignore_paths: Sequence[str] = DEFAULT_IGNORE_PATHS,
        max_file_size: int = MAX_FILE_SIZE,
        max_attempts: int = MAX_SORT_ATTEMPTS,
    ) -> None:
        self.scorer = scorer
        self.ignore_paths = tuple(ignore_paths)
        self.max_file_size = max_file_size
        self.max_attempts = max_attempts

    async def collect_and_score(self, root: Path, query: str) -> List[Candidate]:
        paths = collect_files(root, self.ignore_paths, max_file_size=self.max_file_size)
        LOGGER.debug("Collected %d eligible files under %s", len(paths), root)
        if not paths:
            return []
        return await self.scorer.score_paths(paths, query)

    async def rank(self, root: Path, query: str) -> List[Candidate]:
        for attempt in range(1, self.max_attempts + 1):
            candidates = await self.collect_and_score(root, query)
            if not candidates:
                LOGGER.info("No eligible files under %s", root)
                return []
            if any(candidate.score > 0.0 for candidate in candidates):
                return sort_candidates(candidates)
            LOGGER.warning(
                "Attempt %d/%d: every file scored 0.0", attempt, self.max_attempts
            )
        return []
