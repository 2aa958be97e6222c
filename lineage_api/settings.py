"""Process-wide configuration, read from the environment once.

Every setting lives on a frozen :class:`Settings` instance returned by
:func:`get_settings`.  Tests that change the environment must call
``get_settings.cache_clear()``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str
    private_key: str
    private_key_hash: str
    photo_dir: Path
    photo_url_prefix: str
    strict_marriage_checks: bool
    cors_origins: tuple[str, ...]


def load_settings() -> Settings:
    return Settings(
        database_url=os.environ.get("DATABASE_URL", ""),
        private_key=os.environ.get("PRIVATE_KEY", ""),
        private_key_hash=os.environ.get("PRIVATE_KEY_HASH", ""),
        photo_dir=Path(os.environ.get("PHOTO_DIR", "media")),
        photo_url_prefix=os.environ.get("PHOTO_URL_PREFIX", "/photos").rstrip("/"),
        strict_marriage_checks=_env_flag("REGISTRY_STRICT_MARRIAGE"),
        cors_origins=_env_list("CORS_ORIGINS", "*"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
