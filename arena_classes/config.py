"""Environment based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_TIMEOUT = 30
DEFAULT_ENCODING = "UTF-8"
DEFAULT_MAX_LIST_PAGES = 50


@dataclass(frozen=True)
class ArenaConfig:
    base_url: str
    username: str | None = None
    password: str | None = None
    timeout: int = DEFAULT_TIMEOUT
    encoding: str = DEFAULT_ENCODING
    max_list_pages: int = DEFAULT_MAX_LIST_PAGES
    log_level: str = "INFO"
    log_dir: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))


def load_config() -> ArenaConfig:
    """Build an `ArenaConfig` from `ARENA_*` environment variables (and `.env`)."""
    load_dotenv()

    base_url = os.getenv("ARENA_BASE_URL")
    if not base_url:
        raise ValueError("ARENA_BASE_URL is missing from the environment.")

    return ArenaConfig(
        base_url=base_url,
        username=os.getenv("ARENA_USERNAME"),
        password=os.getenv("ARENA_PASSWORD"),
        timeout=int(os.getenv("ARENA_TIMEOUT", DEFAULT_TIMEOUT)),
        encoding=os.getenv("ARENA_ENCODING", DEFAULT_ENCODING),
        max_list_pages=int(os.getenv("ARENA_MAX_LIST_PAGES", DEFAULT_MAX_LIST_PAGES)),
        log_level=os.getenv("ARENA_LOG_LEVEL", "INFO").upper(),
        log_dir=os.getenv("ARENA_LOG_DIR") or None,
    )
