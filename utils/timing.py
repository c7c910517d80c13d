"""Zeitmessung für FloatScribe.

Context Manager und Hilfsfunktionen für Performance-Tracking.
Funktioniert auch um `await`-Aufrufe herum, da nur die Wall-Clock zählt.
"""

import time
from contextlib import contextmanager

from .logging import get_logger, get_session_id


def format_duration(milliseconds: float) -> str:
    """Formatiert Dauer menschenlesbar: ms für kurze, s für längere Zeiten."""
    if milliseconds >= 1000:
        return f"{milliseconds / 1000:.2f}s"
    return f"{milliseconds:.0f}ms"


def format_bytes(size: int) -> str:
    """Formatiert Byte-Anzahl für Logs (B bzw. KB)."""
    if size >= 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size}B"


def log_preview(text: str, max_length: int = 100) -> str:
    """Kürzt Text für Log-Ausgabe mit Ellipsis wenn nötig."""
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}..."


@contextmanager
def timed_operation(name: str, *, logger=None, include_session: bool = True):
    """Kontextmanager für Zeitmessung mit automatischem Logging.

    Bei einer Exception wird die Dauer mit "fehlgeschlagen" geloggt
    und die Exception unverändert weitergereicht.

    Usage:
        with timed_operation("Transkription"):
            text = await client.transcribe(path)
    """
    op_logger = logger or get_logger()
    prefix = f"[{get_session_id()}] " if include_session else ""
    start = time.perf_counter()
    failed = False
    try:
        yield
    except BaseException:
        failed = True
        raise
    finally:
        elapsed = format_duration((time.perf_counter() - start) * 1000)
        if failed:
            op_logger.info(f"{prefix}{name} fehlgeschlagen nach {elapsed}")
        else:
            op_logger.info(f"{prefix}{name}: {elapsed}")
