"""Permissive decoding of the oracle's JSON replies."""

from __future__ import annotations

import logging
import math
from typing import Callable, List

from pydantic import BaseModel, TypeAdapter, ValidationError, field_validator

LOGGER = logging.getLogger(__name__)


class FileScore(BaseModel):
    filename: str
    score: float

    @field_validator("score")
    @classmethod
    def _clamp(cls, value: float) -> float:
        if math.isnan(value):
            return 0.0
        return min(max(value, 0.0), 1.0)


class FileScores(BaseModel):
    filenames: List[FileScore]


class AnalysisVerdict(BaseModel):
    has_match: bool
    analysis: str | None = None


_SCORE_LIST = TypeAdapter(List[FileScore])


def _wrapped(text: str) -> list[FileScore]:
    return FileScores.model_validate_json(text).filenames


def _bare(text: str) -> list[FileScore]:
    return _SCORE_LIST.validate_json(text)


_SCORE_DECODERS: tuple[tuple[str, Callable[[str], list[FileScore]]], ...] = (
    ("wrapped object", _wrapped),
    ("bare array", _bare),
)


def parse_file_scores(text: str) -> list[FileScore]:
    """Decode a scoring reply; returns an empty list when no shape fits.

    Accepts ``{"filenames": [...]}`` first, then a bare ``[...]``.
    """
    for shape, decode in _SCORE_DECODERS:
        try:
            return decode(text)
        except ValidationError as exc:
            LOGGER.debug(
                "Score reply is not a %s (%d errors). Response was: %s",
                shape,
                exc.error_count(),
                text.strip(),
            )
    return []


def parse_verdict(text: str) -> AnalysisVerdict | None:
    try:
        return AnalysisVerdict.model_validate_json(text)
    except ValidationError as exc:
        LOGGER.debug("Unparsable analysis reply (%s). Response was: %s", exc.error_count(), text.strip())
        return None
