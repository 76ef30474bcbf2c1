"""
Configuration from environment variables (and an optional .env file).

    PLANBOARD_STORE_URL     REST store base URL; unset -> local JSON store
    PLANBOARD_API_KEY       API key for the REST store
    PLANBOARD_DATA_DIR      local JSON store directory
    PLANBOARD_SCHOOL_ID     school whose policy is used (default: "default")
    PLANBOARD_TIMEOUT       HTTP timeout in seconds (default: 30)
    PLANBOARD_OVERVIEW_RPC  server-side overview function; unset -> join locally
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_SCHOOL_ID = "default"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    store_url: Optional[str] = None
    api_key: Optional[str] = None
    data_dir: Optional[Path] = None
    school_id: str = DEFAULT_SCHOOL_ID
    timeout: float = DEFAULT_TIMEOUT
    overview_rpc: Optional[str] = None

    def __repr__(self) -> str:
        # keep the API key out of logs and tracebacks
        key = "********" if self.api_key else None
        return (
            f"Settings(store_url={self.store_url!r}, api_key={key!r}, data_dir={self.data_dir!r}, "
            f"school_id={self.school_id!r}, timeout={self.timeout!r}, overview_rpc={self.overview_rpc!r})"
        )


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings, reading env_file (or a .env found from the cwd) first.

    Variables already set in the environment win over the .env file.
    Raises ValueError for a timeout that is not a positive number.
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv(find_dotenv(usecwd=True))

    raw_timeout = _env("PLANBOARD_TIMEOUT")
    timeout = DEFAULT_TIMEOUT
    if raw_timeout is not None:
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ValueError(f"PLANBOARD_TIMEOUT must be a number, got {raw_timeout!r}") from e
        if timeout <= 0:
            raise ValueError(f"PLANBOARD_TIMEOUT must be > 0, got {raw_timeout!r}")

    data_dir = _env("PLANBOARD_DATA_DIR")
    return Settings(
        store_url=_env("PLANBOARD_STORE_URL"),
        api_key=_env("PLANBOARD_API_KEY"),
        data_dir=Path(data_dir) if data_dir else None,
        school_id=_env("PLANBOARD_SCHOOL_ID") or DEFAULT_SCHOOL_ID,
        timeout=timeout,
        overview_rpc=_env("PLANBOARD_OVERVIEW_RPC"),
    )
