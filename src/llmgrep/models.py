"""Core llmgrep data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Candidate:
    """File paired with its filename relevance score in [0, 1]."""

    path: Path
    score: float


@dataclass(frozen=True, slots=True)
class Match:
    """Confirmed content match for a single file."""

    path: Path
    explanation: str | None
