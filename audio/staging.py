"""Scratch-Dateien für den Upload.

Die Aufnahme (int16-PCM) wird direkt vor dem Upload als WAV ins
Temp-Verzeichnis geschrieben und direkt danach wieder gelöscht.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import numpy as np
import soundfile as sf

from config import (
    CHANNELS,
    SAMPLE_RATE,
    SAMPLE_WIDTH,
    TEMP_RECORDING_PREFIX,
    TEMP_RECORDING_SUFFIX,
)
from errors import StagingIOError
from utils.logging import get_session_id
from utils.timing import format_bytes

logger = logging.getLogger("floatscribe.staging")


def _scratch_path(directory: Path) -> Path:
    """Eindeutiger Dateiname mit Zeitstempel (ns)."""
    while True:
        path = directory / f"{TEMP_RECORDING_PREFIX}{time.time_ns()}{TEMP_RECORDING_SUFFIX}"
        if not path.exists():
            return path


def stage_audio(
    pcm: bytes,
    *,
    directory: Path | None = None,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
) -> Path:
    """Schreibt PCM als WAV in eine eindeutige Scratch-Datei.

    Args:
        pcm: int16-PCM (little-endian, interleaved)
        directory: Zielverzeichnis (default: System-Temp)

    Returns:
        Pfad zur geschriebenen Datei

    Raises:
        StagingIOError: Leere Aufnahme, Schreibfehler oder leere Datei
    """
    frame_bytes = SAMPLE_WIDTH * channels
    usable = len(pcm) - len(pcm) % frame_bytes
    if usable <= 0:
        # Leerer Upload würde ein irreführendes leeres Transkript liefern
        raise StagingIOError("Keine Audiodaten aufgenommen")
    if usable != len(pcm):
        logger.debug(f"Unvollständiger Frame verworfen ({len(pcm) - usable} Bytes)")

    path = _scratch_path(Path(directory) if directory else Path(tempfile.gettempdir()))
    samples = np.frombuffer(pcm[:usable], dtype=np.int16).reshape(-1, channels)

    try:
        sf.write(path, samples, sample_rate, format="WAV", subtype="PCM_16")
        size = path.stat().st_size
    except (OSError, RuntimeError) as e:
        unstage_audio(path)
        raise StagingIOError(f"Scratch-Datei nicht schreibbar: {path} ({e})") from e

    if size == 0:
        unstage_audio(path)
        raise StagingIOError(f"Scratch-Datei ist leer: {path}")

    logger.info(f"[{get_session_id()}] Scratch-Datei: {path.name}, {format_bytes(size)}")
    return path


def unstage_audio(path: Path) -> None:
    """Löscht die Scratch-Datei. Fehler werden nur geloggt."""
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning(f"Scratch-Datei nicht löschbar: {path} ({e})")
        return
    logger.debug(f"Scratch-Datei gelöscht: {path.name}")


def _unstage_late(future: asyncio.Future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    unstage_audio(future.result())


@asynccontextmanager
async def staged_audio(
    pcm: bytes, *, directory: Path | None = None
) -> AsyncIterator[Path]:
    """Scoped Scratch-Datei: schreibt im Worker-Thread, löscht immer beim Verlassen.

    Usage:
        async with staged_audio(pcm) as path:
            text = await transcriber.transcribe(path)
    """
    future = asyncio.ensure_future(
        asyncio.to_thread(stage_audio, pcm, directory=directory)
    )
    try:
        path = await asyncio.shield(future)
    except asyncio.CancelledError:
        # Datei entsteht evtl. noch im Thread
        future.add_done_callback(_unstage_late)
        raise
    try:
        yield path
    finally:
        unstage_audio(path)


__all__ = ["stage_audio", "unstage_audio", "staged_audio"]
