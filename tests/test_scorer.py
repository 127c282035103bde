"""Tests for filename relevance scoring."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Callable

import pytest

from llmgrep.oracle.client import OracleResponseError, OracleTimeoutError, OracleUnavailableError
from llmgrep.search.prompts import FILENAME_SYSTEM_PROMPT
from llmgrep.search.scorer import RelevanceScorer


def _names_in(prompt: str) -> list[str]:
    match = re.search(r"Analyze these filenames: (\[.*?\])\nQuery", prompt, re.S)
    assert match is not None
    return json.loads(match.group(1))


def _files(*names: str) -> list[tuple[Path, str]]:
    return [(Path("repo") / name, name) for name in names]


class TestScoreBatch:
    """Test RelevanceScorer.score_batch."""

    @pytest.mark.asyncio
    async def test_matches_by_filename_not_position(self, fake_oracle_factory: Callable) -> None:
        """Should map reordered replies back to the requested names."""
        oracle = fake_oracle_factory(
            ['{"filenames": [{"filename": "b.py", "score": 0.8}, {"filename": "a.py", "score": 0.1}]}']
        )
        scorer = RelevanceScorer(oracle)

        scores = await scorer.score_batch(_files("a.py", "b.py"), "auth")

        assert scores == [0.1, 0.8]

    @pytest.mark.asyncio
    async def test_missing_entries_default_to_zero(self, fake_oracle_factory: Callable) -> None:
        oracle = fake_oracle_factory(['[{"filename": "b.py", "score": 0.7}]'])
        scorer = RelevanceScorer(oracle)

        scores = await scorer.score_batch(_files("a.py", "b.py", "c.py"), "auth")

        assert scores == [0.0, 0.7, 0.0]

    @pytest.mark.asyncio
    async def test_first_duplicate_wins(self, fake_oracle_factory: Callable) -> None:
        oracle = fake_oracle_factory(
            ['[{"filename": "a.py", "score": 0.2}, {"filename": "a.py", "score": 0.9}]']
        )

        scores = await RelevanceScorer(oracle).score_batch(_files("a.py"), "q")

        assert scores == [0.2]

    @pytest.mark.asyncio
    async def test_path_echo_is_not_matched(self, fake_oracle_factory: Callable) -> None:
        """Should require the exact name used in the prompt."""
        oracle = fake_oracle_factory(['[{"filename": "repo/a.py", "score": 0.9}]'])

        scores = await RelevanceScorer(oracle).score_batch(_files("a.py"), "q")

        assert scores == [0.0]

    @pytest.mark.asyncio
    async def test_prompt_contains_names_and_query(self, fake_oracle_factory: Callable) -> None:
        oracle = fake_oracle_factory(["[]"])

        await RelevanceScorer(oracle).score_batch(_files("a.py", "b.md"), "user login")

        system, prompt = oracle.calls[0]
        assert system == FILENAME_SYSTEM_PROMPT
        assert _names_in(prompt) == ["a.py", "b.md"]
        assert "'user login'" in prompt

    @pytest.mark.asyncio
    async def test_timeout_zeroes_batch(self, fake_oracle_factory: Callable) -> None:
        oracle = fake_oracle_factory([OracleTimeoutError("slow")])

        scores = await RelevanceScorer(oracle).score_batch(_files("a.py", "b.py"), "q")

        assert scores == [0.0, 0.0]

    @pytest.mark.asyncio
    async def test_response_error_zeroes_batch(self, fake_oracle_factory: Callable) -> None:
        """Should score a batch 0.0 when the server answers with an error."""
        oracle = fake_oracle_factory([OracleResponseError("Ollama returned 500")])

        scores = await RelevanceScorer(oracle).score_batch(_files("a.py", "b.py"), "q")

        assert scores == [0.0, 0.0]

    @pytest.mark.asyncio
    async def test_unavailable_propagates(self, fake_oracle_factory: Callable) -> None:
        oracle = fake_oracle_factory([OracleUnavailableError("down")])

        with pytest.raises(OracleUnavailableError):
            await RelevanceScorer(oracle).score_batch(_files("a.py"), "q")


class TestScore:
    """Test RelevanceScorer.score across batches."""

    @pytest.mark.asyncio
    async def test_batches_of_fixed_size(self, fake_oracle_factory: Callable) -> None:
        """Should send one call per batch, in order."""

        def respond(system: str, prompt: str) -> str:
            return json.dumps([{"filename": name, "score": 0.5} for name in _names_in(prompt)])

        oracle = fake_oracle_factory(respond)
        files = _files(*[f"f{i}.txt" for i in range(250)])

        scores = await RelevanceScorer(oracle, batch_size=100).score(files, "q")

        assert len(oracle.calls) == 3
        assert [len(_names_in(prompt)) for _, prompt in oracle.calls] == [100, 100, 50]
        assert _names_in(oracle.calls[1][1])[0] == "f100.txt"
        assert scores == [0.5] * 250

    @pytest.mark.asyncio
    async def test_malformed_batch_does_not_abort(self, fake_oracle_factory: Callable) -> None:
        """Should zero a malformed batch and keep scoring the next one."""
        oracle = fake_oracle_factory(
            [
                "this is not json at all",
                '{"filenames": [{"filename": "c.py", "score": 0.6}]}',
            ]
        )
        files = _files("a.py", "b.py", "c.py")

        scores = await RelevanceScorer(oracle, batch_size=2).score(files, "q")

        assert scores == [0.0, 0.0, 0.6]
        assert len(oracle.calls) == 2

    @pytest.mark.asyncio
    async def test_failed_batch_does_not_abort(self, fake_oracle_factory: Callable) -> None:
        """Should keep scoring later batches after a server error."""
        oracle = fake_oracle_factory(
            [OracleResponseError("500"), '[{"filename": "c.py", "score": 0.6}]']
        )
        files = _files("a.py", "b.py", "c.py")

        scores = await RelevanceScorer(oracle, batch_size=2).score(files, "q")

        assert scores == [0.0, 0.0, 0.6]
        assert len(oracle.calls) == 2

    @pytest.mark.asyncio
    async def test_output_aligned_with_input(self, fake_oracle_factory: Callable) -> None:
        """Should return one score per input even for an empty reply."""
        oracle = fake_oracle_factory(["[]", "{}"])
        files = _files(*[f"{i}.py" for i in range(7)])

        scores = await RelevanceScorer(oracle, batch_size=4).score(files, "q")

        assert scores == [0.0] * 7

    @pytest.mark.asyncio
    async def test_no_files_no_calls(self, fake_oracle_factory: Callable) -> None:
        oracle = fake_oracle_factory()

        assert await RelevanceScorer(oracle).score([], "q") == []
        assert oracle.calls == []

    @pytest.mark.asyncio
    async def test_score_paths_uses_base_names(self, fake_oracle_factory: Callable) -> None:
        oracle = fake_oracle_factory(['[{"filename": "auth.py", "score": 0.9}]'])
        paths = [Path("src/auth.py"), Path("docs/guide.md")]

        candidates = await RelevanceScorer(oracle).score_paths(paths, "login")

        assert [(c.path, c.score) for c in candidates] == [
            (Path("src/auth.py"), 0.9),
            (Path("docs/guide.md"), 0.0),
        ]

    def test_rejects_non_positive_batch_size(self, fake_oracle_factory: Callable) -> None:
        with pytest.raises(ValueError):
            RelevanceScorer(fake_oracle_factory(), batch_size=0)
