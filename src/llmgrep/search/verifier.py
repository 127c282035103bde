"""Second pass: chunked content verification of ranked candidates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterator, Iterable

from llmgrep.config import CHUNK_SIZE, MAX_FILE_SIZE
from llmgrep.models import Candidate, Match
from llmgrep.oracle.client import Oracle, OracleResponseError, OracleTimeoutError
from llmgrep.oracle.parsing import AnalysisVerdict, parse_verdict
from llmgrep.search.prompts import ANALYSIS_SYSTEM_PROMPT, analysis_prompt
from llmgrep.utils.text import chunk_text, decode_lossy

LOGGER = logging.getLogger(__name__)


class ContentVerifier:
    """Asks the oracle, chunk by chunk, whether a file matches the query."""

    def __init__(
        self,
        oracle: Oracle,
        *,
        chunk_chars: int = CHUNK_SIZE,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self.oracle = oracle
        self.chunk_chars = chunk_chars
        self.max_file_size = max_file_size

    async def analyze_chunk(self, path: Path, chunk: str, query: str) -> AnalysisVerdict | None:
        response = await self.oracle.generate(
            ANALYSIS_SYSTEM_PROMPT, analysis_prompt(path, chunk, query), json_format=True
        )
        return parse_verdict(response)

    async def verify_file(self, candidate: Candidate, query: str) -> Match | None:
        """Return the first matching chunk's verdict for ``candidate``, if any.

        A file that disappeared or grew past the size cap since collection
        is skipped. A timeout abandons the rest of the file.
        """
        path = candidate.path
        try:
            if path.stat().st_size > self.max_file_size:
                LOGGER.debug("Skipping %s, larger than %d bytes", path, self.max_file_size)
                return None
            content = path.read_bytes()
        except OSError as exc:
            LOGGER.debug("Skipping %s, no longer readable: %s", path, exc)
            return None

        LOGGER.info("Analyzing content of %s (filename score: %.2f)", path, candidate.score)
        text = decode_lossy(content)
        for index, chunk in enumerate(chunk_text(text, max_chars=self.chunk_chars)):
            try:
                verdict = await self.analyze_chunk(path, chunk, query)
            except OracleTimeoutError as exc:
                LOGGER.warning("Giving up on %s at chunk %d: %s", path, index, exc)
                return None
            except OracleResponseError as exc:
                LOGGER.debug("Chunk %d of %s failed: %s", index, path, exc)
                continue

            if verdict is not None and verdict.has_match:
                return Match(path=path, explanation=verdict.analysis)
        return None

    async def verify(self, candidates: Iterable[Candidate], query: str) -> AsyncIterator[Match]:
        for candidate in candidates:
            match = await self.verify_file(candidate, query)
            if match is not None:
                yield match
