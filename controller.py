"""UI-Grenze für FloatScribe.

Der Controller besitzt die RecordingSession und bietet der UI
Request/Response-Aufrufe (start_recording, stop_recording, rephrase_text)
plus Push-Events (Audio-Pegel, Transkripte, Fehler) über subscribe().
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Optional

from audio.capture import AudioCapture
from errors import AlreadyRecording, AuthError, FloatScribeError
from interfaces import AudioSource, Rephraser, SpeechToText
from providers import get_provider
from providers.openai import verify_api_key
from refine.llm import OpenAIRephraser
from session import RecordingSession, transcribe_pcm
from utils.logging import get_session_id, mask_secret
from utils.preferences import Settings, load_settings, save_settings
from utils.state import AppEvent, AudioLevelSample, MessageType, SessionState

logger = logging.getLogger("floatscribe.controller")

Subscriber = Callable[[AppEvent], None]


class FloatScribeController:
    """Top-Level-Controller zwischen UI und Aufnahme-Pipeline.

    Settings werden zu Beginn jeder Operation als Snapshot gelesen;
    Änderungen während eines laufenden Uploads wirken erst beim nächsten Aufruf.
    """

    def __init__(
        self,
        *,
        settings_loader: Callable[[], Settings] = load_settings,
        settings_saver: Callable[[Settings], None] = save_settings,
        capture_factory: Callable[[], AudioSource] = AudioCapture,
        transcriber_factory: Callable[[str], SpeechToText] = partial(
            get_provider, "openai"
        ),
        rephraser_factory: Callable[[str], Rephraser] = OpenAIRephraser,
        key_verifier=verify_api_key,
    ) -> None:
        self._load_settings = settings_loader
        self._save_settings = settings_saver
        self._transcriber_factory = transcriber_factory
        self._rephraser_factory = rephraser_factory
        self._verify_key = key_verifier
        self._subscribers: list[Subscriber] = []
        self.session = RecordingSession(
            capture_factory,
            on_level=self._on_level,
            on_state=self._on_state,
        )

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Registriert einen Event-Empfänger. Gibt eine Abmelde-Funktion zurück."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _emit(self, type_: MessageType, payload=None) -> None:
        event = AppEvent(type=type_, payload=payload)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber-Fehler bei {type_.name}")

    def _on_level(self, sample: AudioLevelSample) -> None:
        self._emit(MessageType.AUDIO_LEVEL, sample)

    def _on_state(self, state: SessionState) -> None:
        self._emit(MessageType.STATUS_UPDATE, state)

    def _report(self, err: Exception) -> None:
        """AuthError → Einstellungen öffnen, sonst generische Fehlermeldung."""
        if isinstance(err, AuthError):
            self._emit(MessageType.NEEDS_CREDENTIALS, str(err))
        else:
            self._emit(MessageType.ERROR, str(err))

    def _require_credentials(self) -> Settings:
        settings = self._load_settings()
        if not settings.api_key:
            logger.info("Kein API-Key gesetzt, UI soll Einstellungen öffnen")
            err = AuthError("OpenAI API-Key nicht gesetzt")
            self._report(err)
            raise err
        return settings

    # =========================================================================
    # Aufnahme
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self.session.state

    async def start_recording(self) -> None:
        settings = self._require_credentials()
        logger.info(
            f"[{get_session_id()}] Aufnahme angefordert "
            f"(key={mask_secret(settings.api_key)}, lang={settings.language})"
        )
        try:
            await self.session.start()
        except FloatScribeError as e:
            logger.warning(f"Aufnahme-Start fehlgeschlagen: {e}")
            self._report(e)
            raise

    async def stop_recording(self, payload: Optional[bytes] = None) -> str:
        """Beendet die Aufnahme und liefert das Transkript.

        Mit payload (extern aufgenommenes int16-PCM) wird dieses direkt
        transkribiert; das ist nur ohne laufende Aufnahme erlaubt.
        """
        try:
            settings = self._require_credentials()
        except AuthError:
            # Key während der Aufnahme entfernt: Mikrofon trotzdem freigeben
            await self.session.cancel()
            raise
        transcriber = self._transcriber_factory(settings.api_key)
        try:
            if payload is not None:
                if self.session.state is not SessionState.IDLE:
                    raise AlreadyRecording(
                        "Payload-Transkription während laufender Aufnahme nicht möglich"
                    )
                text = await transcribe_pcm(
                    payload, transcriber, language=settings.language
                )
            else:
                text = await self.session.stop(transcriber, language=settings.language)
        except FloatScribeError as e:
            logger.warning(f"Transkription fehlgeschlagen: {e}")
            self._report(e)
            raise

        self._emit(MessageType.TRANSCRIPT_RESULT, text)
        return text

    async def cancel_recording(self) -> None:
        await self.session.cancel()

    # =========================================================================
    # Umformulierung
    # =========================================================================

    async def rephrase_text(self, text: str) -> str:
        settings = self._require_credentials()
        rephraser = self._rephraser_factory(settings.api_key)
        try:
            result = await rephraser.rephrase(
                text,
                model=settings.rephrase_model,
                prompt=settings.rephrase_prompt,
            )
        except FloatScribeError as e:
            logger.warning(f"Umformulierung fehlgeschlagen: {e}")
            self._report(e)
            raise

        self._emit(MessageType.REPHRASE_RESULT, result)
        return result

    # =========================================================================
    # Einstellungen
    # =========================================================================

    def get_settings(self) -> Settings:
        return self._load_settings()

    def save_settings(self, settings: Settings) -> None:
        self._save_settings(settings)

    async def test_api_key(self, api_key: str) -> bool:
        return await self._verify_key(api_key)


__all__ = ["FloatScribeController"]
