"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_MODEL = "dolphin-mistral:latest"
DEFAULT_HOST = "http://localhost:11434"

DEFAULT_IGNORE_PATHS: tuple[str, ...] = (
    ".git",
    ".gitignore",
    ".vscode",
    ".idea",
    ".vscode-test",
    "target",
    "dist",
    ".gradle",
    "dep",
    "node_modules",
    "package-lock.json",
    "Cargo.lock",
)

MAX_FILE_SIZE = 1024 * 1024
BATCH_SIZE = 100
CHUNK_SIZE = 2000
MAX_SORT_ATTEMPTS = 3


def normalize_host(host: str) -> str:
    """Return ``host`` as a base URL, adding ``http://`` when no scheme is given."""
    host = host.strip().rstrip("/")
    if "://" not in host:
        host = f"http://{host}"
    return host


def _get_default_host() -> str:
    """Honour ``OLLAMA_HOST`` the same way the ollama CLI does."""
    return normalize_host(os.environ.get("OLLAMA_HOST") or DEFAULT_HOST)


@dataclass(slots=True)
class AppConfig:
    model_name: str = DEFAULT_MODEL
    ollama_host: str | None = None
    ignore_paths: tuple[str, ...] = field(default=DEFAULT_IGNORE_PATHS)
    batch_size: int = BATCH_SIZE
    chunk_chars: int = CHUNK_SIZE
    max_file_size: int = MAX_FILE_SIZE
    max_attempts: int = MAX_SORT_ATTEMPTS
    request_timeout: float | None = 120.0

    def __post_init__(self) -> None:
        if self.ollama_host is None:
            self.ollama_host = _get_default_host()
        else:
            self.ollama_host = normalize_host(self.ollama_host)
        self.ignore_paths = tuple(self.ignore_paths)
        if self.request_timeout is not None and self.request_timeout <= 0:
            self.request_timeout = None
