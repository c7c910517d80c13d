"""Aufnahme-Session: Zustandsautomat für Capture → Puffer → Upload.

Zustände: IDLE → RECORDING → FINALIZING → IDLE

Der Zustand selbst ist der Guard gegen überlappende start()/stop()-Aufrufe.
Jeder Ausgang aus stop() (Erfolg, Fehler, Abbruch) gibt Mikrofon, Puffer
und Scratch-Datei frei und kehrt nach IDLE zurück.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from audio.buffer import ChunkBuffer
from audio.capture import AudioCapture
from audio.staging import staged_audio
from errors import AlreadyRecording, NotRecording, RecordingCancelled
from interfaces import AudioSource, SpeechToText
from utils.logging import get_session_id
from utils.state import AudioLevelSample, SessionState
from utils.timing import format_bytes, format_duration, timed_operation

logger = logging.getLogger("floatscribe.session")

LevelObserver = Callable[[AudioLevelSample], None]
StateObserver = Callable[[SessionState], None]


async def transcribe_pcm(
    pcm: bytes, transcriber: SpeechToText, *, language: Optional[str] = None
) -> str:
    """Stage → Transcribe → Unstage. Die Scratch-Datei wird in jedem Fall gelöscht."""
    async with staged_audio(pcm) as path:
        return await transcriber.transcribe(path, language=language)


class RecordingSession:
    """Eine Aufnahme zur Zeit, explizit besessen vom Controller.

    Usage:
        session = RecordingSession(on_level=print)
        await session.start()
        ...
        text = await session.stop(transcriber, language="en")
    """

    def __init__(
        self,
        capture_factory: Callable[[], AudioSource] = AudioCapture,
        *,
        on_level: Optional[LevelObserver] = None,
        on_state: Optional[StateObserver] = None,
    ) -> None:
        self._capture_factory = capture_factory
        self._on_level = on_level
        self._on_state = on_state

        self._state = SessionState.IDLE
        self._capture: Optional[AudioSource] = None
        self._buffer: Optional[ChunkBuffer] = None
        self._pump_task: Optional[asyncio.Task] = None
        self._finalize_task: Optional[asyncio.Task] = None
        self._cancel_requested = False

    # =========================================================================
    # Zustand
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def buffer(self) -> Optional[ChunkBuffer]:
        """Puffer der laufenden Aufnahme, None im Leerlauf."""
        return self._buffer

    @property
    def is_recording(self) -> bool:
        return self._state is SessionState.RECORDING

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug(f"[{get_session_id()}] Session: {self._state.value} → {state.value}")
        self._state = state
        if self._on_state is not None:
            try:
                self._on_state(state)
            except Exception:
                logger.exception("State-Observer fehlgeschlagen")

    # =========================================================================
    # Aufnahme
    # =========================================================================

    async def start(self) -> None:
        """Belegt das Mikrofon und beginnt zu puffern.

        Raises:
            AlreadyRecording: Wenn die Session nicht IDLE ist
            DeviceUnavailable: Mikrofon nicht verfügbar (Session bleibt IDLE)
        """
        if self._state is not SessionState.IDLE or self._capture is not None:
            raise AlreadyRecording(f"Aufnahme läuft bereits ({self._state.value})")

        capture = self._capture_factory()
        # Guard gegen zweites start() während open() wartet
        self._capture = capture
        try:
            await capture.open()
        except BaseException:
            self._capture = None
            try:
                await capture.close()
            except Exception as e:
                logger.debug(f"capture.close() nach Fehlschlag: {e}")
            raise

        self._buffer = ChunkBuffer()
        self._cancel_requested = False
        self._pump_task = asyncio.ensure_future(self._pump(capture, self._buffer))
        self._set_state(SessionState.RECORDING)
        logger.info(f"[{get_session_id()}] Aufnahme gestartet")

    async def _pump(self, capture: AudioSource, buffer: ChunkBuffer) -> None:
        """Überträgt Chunks in Ankunftsreihenfolge in den Puffer, bis die Capture endet."""
        async for chunk in capture.chunks():
            buffer.append(chunk.data)
            if self._on_level is not None:
                sample = AudioLevelSample(timestamp=chunk.timestamp, level=chunk.level)
                try:
                    self._on_level(sample)
                except Exception:
                    logger.exception("Level-Observer fehlgeschlagen")

    async def _release_capture(self) -> None:
        """Schließt die Capture und wartet, bis alle bereits gelieferten Chunks gepuffert sind.

        Idempotent: Capture und Pump werden vor dem ersten await übernommen.
        """
        capture, self._capture = self._capture, None
        pump, self._pump_task = self._pump_task, None
        try:
            if capture is not None:
                await capture.close()
        finally:
            # close() beendet den Chunk-Stream, der Pump läuft danach aus
            if pump is not None:
                await pump

    def _teardown(self) -> None:
        if self._buffer is not None:
            self._buffer.reset()
        self._buffer = None
        self._finalize_task = None
        self._cancel_requested = False
        self._set_state(SessionState.IDLE)

    async def stop(
        self, transcriber: SpeechToText, *, language: Optional[str] = None
    ) -> str:
        """Beendet die Aufnahme und transkribiert sie.

        Raises:
            NotRecording: Wenn keine Aufnahme läuft (keine Seiteneffekte)
            RecordingCancelled: Wenn cancel() während der Finalisierung kam
            StagingIOError, AuthError, UpstreamError: aus Staging/Upload
        """
        if self._state is not SessionState.RECORDING:
            raise NotRecording(f"Keine aktive Aufnahme ({self._state.value})")

        self._set_state(SessionState.FINALIZING)
        buffer = self._buffer
        try:
            # Ab hier nimmt die Capture keine Chunks mehr an
            await self._release_capture()
            if self._cancel_requested:
                raise RecordingCancelled("Aufnahme abgebrochen")

            task = self._finalize_task = asyncio.ensure_future(
                self._finalize(buffer, transcriber, language)
            )
            try:
                return await task
            except asyncio.CancelledError:
                if self._cancel_requested:
                    raise RecordingCancelled("Transkription abgebrochen") from None
                raise
        finally:
            self._teardown()

    async def _finalize(
        self, buffer: ChunkBuffer, transcriber: SpeechToText, language: Optional[str]
    ) -> str:
        logger.info(
            f"[{get_session_id()}] Aufnahme: {format_duration(buffer.duration * 1000)}, "
            f"{format_bytes(buffer.total_bytes)} in {buffer.chunk_count} Chunks"
        )
        pcm = buffer.drain()
        with timed_operation("Finalisierung", logger=logger):
            return await transcribe_pcm(pcm, transcriber, language=language)

    async def cancel(self) -> None:
        """Bricht die laufende Aufnahme bzw. Finalisierung ab.

        RECORDING: Mikrofon freigeben, Puffer verwerfen.
        FINALIZING: Finalisierung am aktuellen await abbrechen; stop() wirft
        dann RecordingCancelled. IDLE: keine Wirkung.
        """
        if self._state is SessionState.RECORDING:
            logger.info(f"[{get_session_id()}] Aufnahme verworfen")
            # Vor dem ersten await: stop()/start() sehen keinen RECORDING-Zustand mehr
            self._set_state(SessionState.FINALIZING)
            try:
                await self._release_capture()
            finally:
                self._teardown()
        elif self._state is SessionState.FINALIZING:
            logger.info(f"[{get_session_id()}] Finalisierung wird abgebrochen")
            self._cancel_requested = True
            if self._finalize_task is not None:
                self._finalize_task.cancel()


__all__ = ["RecordingSession", "transcribe_pcm"]
