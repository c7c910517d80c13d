"""Persistente Einstellungen für FloatScribe.

Speichert die Settings in ~/.floatscribe/settings.json.
Die Pipeline liest sie nur als Snapshot zu Beginn jeder Operation.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from config import (
    DEFAULT_LANGUAGE,
    DEFAULT_REPHRASE_MODEL,
    SETTINGS_FILE,
    SUPPORTED_LANGUAGES,
)
from refine.prompts import DEFAULT_REPHRASE_PROMPT

logger = logging.getLogger("floatscribe.preferences")


@dataclass(frozen=True)
class Settings:
    """Snapshot der User-Einstellungen."""

    api_key: str = ""
    language: str = DEFAULT_LANGUAGE
    rephrase_model: str = DEFAULT_REPHRASE_MODEL
    rephrase_prompt: str = DEFAULT_REPHRASE_PROMPT

    def with_updates(self, **changes) -> "Settings":
        """Gibt eine Kopie mit geänderten Feldern zurück (None wird ignoriert)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _coerce(data: dict) -> Settings:
    """Baut Settings aus einem JSON-Dict, leere Felder fallen auf Defaults zurück."""
    defaults = Settings()
    language = str(data.get("language") or defaults.language)
    if language not in SUPPORTED_LANGUAGES:
        logger.warning(f"Unbekannte Sprache {language!r}, verwende {defaults.language}")
        language = defaults.language
    return Settings(
        api_key=str(data.get("api_key") or "").strip(),
        language=language,
        rephrase_model=str(data.get("rephrase_model") or "").strip()
        or defaults.rephrase_model,
        rephrase_prompt=str(data.get("rephrase_prompt") or "").strip()
        or defaults.rephrase_prompt,
    )


def load_settings(path: Path | None = None) -> Settings:
    """Lädt Settings aus JSON.

    Fehlt der API-Key in der Datei, wird OPENAI_API_KEY aus der Umgebung genutzt.
    Eine kaputte Datei ergibt Defaults statt eines Fehlers.
    """
    path = path or SETTINGS_FILE
    data: dict = {}
    if path.exists():
        try:
            loaded = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(loaded, dict):
                data = loaded
            else:
                logger.warning(f"Settings-Datei hat kein Objekt: {path}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Settings nicht lesbar ({e}), verwende Defaults")

    settings = _coerce(data)
    if not settings.api_key:
        env_key = (os.getenv("OPENAI_API_KEY") or "").strip()
        if env_key:
            settings = replace(settings, api_key=env_key)
    return settings


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Speichert Settings als JSON (ganzer Datensatz)."""
    if settings.language not in SUPPORTED_LANGUAGES:
        raise ValueError(
            f"Ungültige Sprache '{settings.language}'. "
            f"Unterstützt: {', '.join(SUPPORTED_LANGUAGES)}"
        )
    path = path or SETTINGS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
    logger.info(f"Settings gespeichert: {path}")


__all__ = ["Settings", "load_settings", "save_settings"]
