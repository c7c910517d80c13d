"""Mikrofon-Aufnahme für FloatScribe.

Öffnet genau einen sounddevice-Stream (mono, 16kHz, int16) und reicht
die 100ms-Blöcke aus dem PortAudio-Thread an den Event-Loop weiter.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator

import numpy as np

from config import (
    CHANNELS,
    CHUNK_MS,
    DEVICE_CLOSE_TIMEOUT,
    DEVICE_OPEN_TIMEOUT,
    INT16_MAX,
    SAMPLE_RATE,
    SAMPLE_WIDTH,
)
from errors import DeviceUnavailable
from utils.env import get_env_float

logger = logging.getLogger("floatscribe.capture")


@dataclass(frozen=True)
class AudioChunk:
    """Ein Block int16-PCM mit dem daraus berechneten Pegel."""

    data: bytes
    level: float
    timestamp: float


def compute_level(pcm: bytes) -> float:
    """Pegel 0–100: RMS der int16-Samples relativ zu INT16_MAX, gedeckelt bei 100."""
    usable = len(pcm) - len(pcm) % SAMPLE_WIDTH
    if usable <= 0:
        return 0.0
    samples = np.frombuffer(pcm[:usable], dtype=np.int16).astype(np.float64)
    rms = float(np.sqrt(np.mean(samples**2)))
    return min(100.0, rms / INT16_MAX * 100.0)


def _shutdown_stream(stream) -> None:
    """Stoppt und schließt einen Stream. Fehler werden nur geloggt."""
    try:
        stream.stop()
    except Exception as e:
        logger.debug(f"stream.stop() fehlgeschlagen: {e}")
    try:
        stream.close()
    except Exception as e:
        logger.debug(f"stream.close() fehlgeschlagen: {e}")


def _close_late_stream(future: asyncio.Future) -> None:
    """Gibt einen Stream frei, der erst nach dem Timeout geöffnet wurde."""
    if future.cancelled() or future.exception() is not None:
        return
    logger.warning("Mikrofon nach Timeout geöffnet – wird sofort wieder freigegeben")
    future.get_loop().run_in_executor(None, _shutdown_stream, future.result())


class AudioCapture:
    """Exklusiver Mikrofon-Zugriff mit async Chunk-Stream.

    Usage:
        async with AudioCapture() as capture:
            async for chunk in capture.chunks():
                ...

    Echo-Cancellation und Noise-Suppression bietet PortAudio nicht an;
    das Signal kommt so, wie es das Betriebssystem liefert.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        channels: int = CHANNELS,
        chunk_ms: int = CHUNK_MS,
        open_timeout: float | None = None,
        device: int | str | None = None,
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.blocksize = sample_rate * chunk_ms // 1000
        self.open_timeout = (
            open_timeout
            if open_timeout is not None
            else get_env_float("FLOATSCRIBE_OPEN_TIMEOUT", DEVICE_OPEN_TIMEOUT)
        )
        self.device = device

        self._stream = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[AudioChunk | None] | None = None
        # Nur solange True, werden Callbacks in die Queue übernommen
        self._accepting = False
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def _audio_callback(self, indata, _frames, _time_info, status) -> None:
        """Callback (PortAudio-Thread): Chunk an den Event-Loop übergeben."""
        if not self._accepting:
            return
        if status:
            logger.debug(f"Stream-Status: {status}")
        data = indata.tobytes()
        chunk = AudioChunk(data=data, level=compute_level(data), timestamp=time.time())
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, chunk)
        except RuntimeError:
            logger.debug("Event-Loop beendet, Chunk verworfen")

    def _open_stream(self):
        """Öffnet und startet den InputStream (blockierend, läuft im Executor)."""
        import sounddevice as sd

        stream = sd.InputStream(
            samplerate=self.sample_rate,
            channels=self.channels,
            blocksize=self.blocksize,
            dtype="int16",
            device=self.device,
            callback=self._audio_callback,
        )
        try:
            stream.start()
        except Exception:
            stream.close()
            raise
        return stream

    def _abandon(self, future: asyncio.Future) -> None:
        self._accepting = False
        future.add_done_callback(_close_late_stream)

    async def open(self) -> None:
        """Belegt das Mikrofon.

        Raises:
            DeviceUnavailable: Kein Gerät, Zugriff verweigert oder Timeout
        """
        if self._closed:
            raise RuntimeError("AudioCapture wurde bereits geschlossen")
        if self._stream is not None:
            raise RuntimeError("AudioCapture ist bereits geöffnet")

        try:
            import sounddevice as sd
        except OSError as e:
            # PortAudio-Bibliothek fehlt
            raise DeviceUnavailable(f"Audio-Backend nicht verfügbar: {e}") from e

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._accepting = True

        future = self._loop.run_in_executor(None, self._open_stream)
        try:
            self._stream = await asyncio.wait_for(
                asyncio.shield(future), self.open_timeout
            )
        except asyncio.TimeoutError:
            self._abandon(future)
            raise DeviceUnavailable(
                f"Mikrofon nicht innerhalb von {self.open_timeout:.1f}s verfügbar"
            ) from None
        except asyncio.CancelledError:
            self._abandon(future)
            raise
        except (sd.PortAudioError, ValueError) as e:
            self._accepting = False
            raise DeviceUnavailable(f"Mikrofon nicht verfügbar: {e}") from e

        logger.info(
            f"Mikrofon geöffnet: {self.sample_rate}Hz, {self.channels}ch, "
            f"{self.blocksize} Frames/Chunk"
        )

    async def chunks(self) -> AsyncIterator[AudioChunk]:
        """Liefert Chunks in Ankunftsreihenfolge, endet mit close()."""
        if self._queue is None:
            raise RuntimeError("AudioCapture nicht geöffnet")
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                # Sentinel für weitere Iteratoren erhalten
                self._queue.put_nowait(None)
                return
            yield chunk

    async def close(self) -> None:
        """Gibt das Mikrofon frei und beendet den Chunk-Stream. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._accepting = False
        stream, self._stream = self._stream, None
        try:
            if stream is not None:
                loop = asyncio.get_running_loop()
                try:
                    await asyncio.wait_for(
                        loop.run_in_executor(None, _shutdown_stream, stream),
                        DEVICE_CLOSE_TIMEOUT,
                    )
                except asyncio.TimeoutError:
                    logger.warning(
                        f"Audio-Stream Timeout beim Schließen ({DEVICE_CLOSE_TIMEOUT:.0f}s) – "
                        "PortAudio-Deadlock vermutet, fahre fort"
                    )
                else:
                    logger.debug("Audio-Stream geschlossen")
        finally:
            if self._queue is not None:
                self._queue.put_nowait(None)

    async def __aenter__(self) -> "AudioCapture":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


__all__ = ["AudioCapture", "AudioChunk", "compute_level"]
