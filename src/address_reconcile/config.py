"""Runtime settings for address_reconcile.

Values come from a ``.env`` file in the working directory (when present)
and the process environment; command line flags override them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import find_dotenv, load_dotenv

from .engine import DEFAULT_TOLERANCE
from .overpass import DEFAULT_OVERPASS_URL

ENV_PREFIX = "RECONCILE_"

T = TypeVar("T")


def _read(env: Mapping[str, str], name: str, convert: Callable[[str], T], default: T) -> T:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return convert(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} has an invalid value {raw!r}") from exc


@dataclass
class Settings:
    db_dsn: Optional[str] = None
    match_max_distance: float = DEFAULT_TOLERANCE
    overpass_url: str = DEFAULT_OVERPASS_URL
    country: str = "CZ"
    tile_size: float = 1.0
    http_timeout: int = 300
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, load_file: bool = True) -> "Settings":
        if env is None:
            if load_file:
                load_dotenv(find_dotenv(usecwd=True))
            env = os.environ
        return cls(
            db_dsn=_read(env, "DB_DSN", str, None),
            match_max_distance=_read(env, "MATCH_MAX_DISTANCE", float, DEFAULT_TOLERANCE),
            overpass_url=_read(env, "OVERPASS_URL", str, DEFAULT_OVERPASS_URL),
            country=_read(env, "COUNTRY", str, "CZ"),
            tile_size=_read(env, "TILE_SIZE", float, 1.0),
            http_timeout=_read(env, "HTTP_TIMEOUT", int, 300),
            log_level=_read(env, "LOG_LEVEL", str.upper, "INFO"),
        )
