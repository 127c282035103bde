"""Text helpers for splitting file content into oracle-sized chunks."""

from __future__ import annotations

from typing import Iterator

from llmgrep.config import CHUNK_SIZE


def chunk_text(text: str, *, max_chars: int = CHUNK_SIZE) -> Iterator[str]:
    """Split text into consecutive chunks of at most ``max_chars`` characters.

    Slicing works on code points, so multi-byte characters are never split.
    Joining the chunks gives back ``text`` unchanged.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be positive")
    for start in range(0, len(text), max_chars):
        yield text[start : start + max_chars]


def decode_lossy(content: bytes) -> str:
    """Decode UTF-8, replacing invalid sequences instead of failing."""
    return content.decode("utf-8", errors="replace")
