"""Filename relevance scoring against a query."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from llmgrep.config import BATCH_SIZE
from llmgrep.models import Candidate
from llmgrep.oracle.client import Oracle, OracleResponseError, OracleTimeoutError
from llmgrep.oracle.parsing import parse_file_scores
from llmgrep.search.prompts import FILENAME_SYSTEM_PROMPT, filename_prompt

LOGGER = logging.getLogger(__name__)

ScoredBatch = Sequence[Tuple[Path, str]]


def display_name(path: Path) -> str:
    return path.name


class RelevanceScorer:
    """Scores files by name, one oracle call per batch."""

    def __init__(self, oracle: Oracle, *, batch_size: int = BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.oracle = oracle
        self.batch_size = batch_size

    async def score_batch(self, batch: ScoredBatch, query: str) -> List[float]:
        """Score a single batch, defaulting unanswered names to 0.0.

        Entries are matched by exact filename, so the reply may be reordered
        or incomplete. A timed out or failed request scores the whole batch 0.0.
        """
        names = [name for _, name in batch]
        try:
            response = await self.oracle.generate(
                FILENAME_SYSTEM_PROMPT, filename_prompt(names, query), json_format=True
            )
        except (OracleTimeoutError, OracleResponseError) as exc:
            LOGGER.warning("Scoring batch of %d files failed: %s", len(batch), exc)
            return [0.0] * len(batch)

        scores = parse_file_scores(response)
        result: List[float] = []
        for name in names:
            found = next((entry.score for entry in scores if entry.filename == name), None)
            result.append(0.0 if found is None else found)
        return result

    async def score(self, files: ScoredBatch, query: str) -> List[float]:
        """Score ``files`` in order; the result is aligned with the input."""
        scores: List[float] = []
        for start in range(0, len(files), self.batch_size):
            batch = files[start : start + self.batch_size]
            LOGGER.debug("Scoring files %d-%d of %d", start + 1, start + len(batch), len(files))
            scores.extend(await self.score_batch(batch, query))
        return scores

    async def score_paths(self, paths: Sequence[Path], query: str) -> List[Candidate]:
        files = [(path, display_name(path)) for path in paths]
        scores = await self.score(files, query)
        return [Candidate(path=path, score=score) for path, score in zip(paths, scores)]
