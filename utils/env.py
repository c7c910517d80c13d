"""Helpers for reading and loading environment variables.

We use `.env` files (python-dotenv) plus runtime `os.environ` overrides.

Precedence for load_environment (default `override_existing=False`):
1) Process environment (`os.environ`)
2) User config `.env` (`~/.floatscribe/.env`)
3) Local project `.env` (current working directory)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger("floatscribe.env")


def get_env_str(name: str) -> str | None:
    """Returns a stripped string from env, None when unset or blank."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def get_env_float(name: str, default: float) -> float:
    """Returns a positive float from env with a default when unset/invalid."""
    raw = get_env_str(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ungültiger {name}={raw!r}, verwende {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} muss positiv sein ({raw!r}), verwende {default}")
        return default
    return value


def load_environment(
    *, override_existing: bool = False, user_dir: Path | None = None
) -> None:
    """Loads `.env` values into `os.environ`.

    With `override_existing=True`, `.env` values replace existing env vars.
    User config always wins over the local project `.env`.
    """
    if user_dir is None:
        from config import USER_CONFIG_DIR

        user_dir = USER_CONFIG_DIR

    merged: dict[str, str] = {}
    # Local first, then user (user wins).
    for env_path in (Path(".env"), user_dir / ".env"):
        if not env_path.exists():
            continue
        for key, value in dotenv_values(env_path).items():
            if value is None:
                continue
            merged[str(key)] = str(value)

    for key, value in merged.items():
        if override_existing or key not in os.environ:
            os.environ[key] = value

    if merged:
        logger.debug(f".env geladen: {len(merged)} Einträge")


__all__ = [
    "get_env_float",
    "get_env_str",
    "load_environment",
]
