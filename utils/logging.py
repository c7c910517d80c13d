"""Logging-Setup für FloatScribe.

Konfiguriert Datei-Logging mit Rotation und optionalem stderr-Output.
"""

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Logger-Singleton, Module loggen über Kind-Logger ("floatscribe.session", ...)
logger = logging.getLogger("floatscribe")

_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Session-ID für Korrelation (wird beim ersten Zugriff generiert)
_session_id: str = ""


def _generate_session_id() -> str:
    """Erzeugt kurze, lesbare Session-ID (8 Zeichen)."""
    return uuid.uuid4().hex[:8]


def get_session_id() -> str:
    """Gibt die aktuelle Session-ID zurück."""
    global _session_id
    if not _session_id:
        _session_id = _generate_session_id()
    return _session_id


def get_logger() -> logging.Logger:
    """Gibt den floatscribe Logger zurück."""
    return logger


def mask_secret(secret: str | None, visible: int = 4) -> str:
    """Kürzt API-Keys für Log-Ausgaben auf die ersten Zeichen."""
    if not secret:
        return "<leer>"
    return f"{secret[:visible]}..."


def _file_handler(path: Path) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, "%H:%M:%S"))
    return handler


def setup_logging(debug: bool = False, log_file: Path | None = None) -> None:
    """Konfiguriert Logging: Datei mit Rotation + optional stderr.

    Args:
        debug: Wenn True, wird auch auf stderr geloggt
        log_file: Optionaler Pfad (default: config.LOG_FILE)
    """
    # Lazy import: config soll ohne Logging-Setup importierbar bleiben
    from config import LOG_FILE

    get_session_id()

    # Verhindere doppelte Handler bei mehrfachem Aufruf
    if logger.handlers:
        logger.setLevel(logging.DEBUG if debug else logging.INFO)
        return

    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    try:
        logger.addHandler(_file_handler(log_file or LOG_FILE))
    except OSError as e:
        # Logging darf den App-Start nicht blockieren
        fallback = logging.StreamHandler(sys.stderr)
        fallback.setLevel(logging.WARNING)
        fallback.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(fallback)
        logger.warning(f"Log-Datei nicht beschreibbar ({e}), logge auf stderr")

    # Stderr-Handler (nur im Debug-Modus)
    if debug:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG)
        stderr_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(stderr_handler)


def log(message: str) -> None:
    """Status-Meldung auf stderr.

    Hält stdout sauber für Pipes (z.B. `floatscribe record | pbcopy`).
    """
    print(message, file=sys.stderr)


def error(message: str) -> None:
    """Fehlermeldung auf stderr."""
    print(f"Fehler: {message}", file=sys.stderr)
