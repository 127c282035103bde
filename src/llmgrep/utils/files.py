"""Utility helpers for collecting searchable files."""

from __future__ import annotations

import logging
from pathlib import Path, PurePath
from typing import Iterable, Iterator, Sequence

from llmgrep.config import MAX_FILE_SIZE

LOGGER = logging.getLogger(__name__)

MIN_BINARY_CHECK_SIZE = 1000
BINARY_THRESHOLD = 300  # 30% of MIN_BINARY_CHECK_SIZE


def is_binary(content: bytes) -> bool:
    """Guess whether ``content`` is binary from its first kilobyte.

    Counts NUL and non-ASCII bytes; more than 300 of them in the first 1000
    bytes means binary. Cheap and approximate, UTF-8 heavy text can trip it.
    """
    window = content[:MIN_BINARY_CHECK_SIZE]
    suspicious = sum(1 for byte in window if byte == 0 or byte >= 128)
    return suspicious > BINARY_THRESHOLD


def should_ignore(path: Path, root: Path, ignore_paths: Iterable[str]) -> bool:
    """Return True when ``path`` relative to ``root`` starts with an ignore pattern.

    Matching is done on whole path components, so ``.git`` ignores
    ``.git/config`` but not ``.github/workflows``.
    """
    try:
        rel_parts = path.relative_to(root).parts
    except ValueError:
        rel_parts = path.parts
    for pattern in ignore_paths:
        parts = PurePath(pattern).parts
        if parts and rel_parts[: len(parts)] == parts:
            return True
    return False


def is_text_candidate(path: Path, max_file_size: int = MAX_FILE_SIZE) -> bool:
    """Check size, binary profile and UTF-8 validity of a single file."""
    try:
        if path.stat().st_size > max_file_size:
            return False
        content = path.read_bytes()
    except OSError as exc:
        LOGGER.debug("Skipping unreadable file %s: %s", path, exc)
        return False

    if is_binary(content):
        return False
    try:
        content.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def _walk(
    directory: Path,
    root: Path,
    ignore_paths: Sequence[str],
    max_file_size: int,
) -> Iterator[Path]:
    entries = sorted(directory.iterdir())
    for entry in entries:
        if should_ignore(entry, root, ignore_paths):
            continue

        if entry.is_dir():
            if entry.is_symlink():
                continue
            try:
                yield from _walk(entry, root, ignore_paths, max_file_size)
            except OSError as exc:
                LOGGER.debug("Skipping unreadable directory %s: %s", entry, exc)
            continue

        # sockets, FIFOs and dangling links
        if not entry.is_file():
            continue
        if is_text_candidate(entry, max_file_size):
            yield entry


def collect_files(
    root: Path,
    ignore_paths: Sequence[str] = (),
    *,
    max_file_size: int = MAX_FILE_SIZE,
) -> list[Path]:
    """Recursively collect text files under ``root`` eligible for search.

    Errors listing ``root`` itself propagate; anything below it that cannot
    be read is skipped.
    """
    return list(_walk(root, root, tuple(ignore_paths), max_file_size))
