"""OpenAI Whisper API Provider.

Lädt die Scratch-Datei zur OpenAI Transcription API hoch (whisper-1).
SDK-Fehler werden auf AuthError bzw. UpstreamError abgebildet.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path

import openai
from openai import AsyncOpenAI

from config import DEFAULT_TRANSCRIBE_MODEL, REQUEST_TIMEOUT
from errors import AuthError, UpstreamError
from utils.env import get_env_float
from utils.logging import mask_secret
from utils.timing import format_bytes, log_preview, timed_operation

logger = logging.getLogger("floatscribe.providers.openai")


def create_client(api_key: str, *, timeout: float | None = None) -> AsyncOpenAI:
    """Erzeugt einen AsyncOpenAI-Client ohne SDK-Retries.

    Raises:
        AuthError: Wenn kein API-Key übergeben wurde
    """
    if not api_key or not api_key.strip():
        raise AuthError("OpenAI API-Key nicht gesetzt")
    if timeout is None:
        timeout = get_env_float("FLOATSCRIBE_REQUEST_TIMEOUT", REQUEST_TIMEOUT)
    logger.debug(f"OpenAI-Client initialisiert (key={mask_secret(api_key)})")
    # Kein lokaler Retry: Fehler gehen direkt an den Aufrufer
    return AsyncOpenAI(api_key=api_key.strip(), timeout=timeout, max_retries=0)


@contextmanager
def translate_api_errors(operation: str):
    """Übersetzt openai-Exceptions in die FloatScribe-Fehler."""
    try:
        yield
    except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
        logger.warning(f"{operation}: API-Key abgelehnt (HTTP {e.status_code})")
        raise AuthError(f"API-Key ungültig oder ohne Berechtigung: {e.message}") from e
    except openai.APIStatusError as e:
        raise UpstreamError(f"{operation} fehlgeschlagen: HTTP {e.status_code}") from e
    except openai.APIConnectionError as e:
        raise UpstreamError(f"{operation} fehlgeschlagen: keine Verbindung ({e})") from e
    except openai.APIError as e:
        raise UpstreamError(f"{operation} fehlgeschlagen: {e}") from e


class OpenAITranscriber:
    """OpenAI Whisper API Provider.

    Der Client wird beim ersten Aufruf erzeugt; ein fehlender Key
    fällt erst dort als AuthError auf.
    """

    name = "openai"
    default_model = DEFAULT_TRANSCRIBE_MODEL

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        *,
        timeout: float | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = create_client(self.api_key, timeout=self.timeout)
        return self._client

    async def transcribe(self, audio_path: Path, *, language: str | None = None) -> str:
        """Transkribiert eine Audio-Datei.

        Args:
            audio_path: Pfad zur (Scratch-)Datei
            language: Sprachcode oder None für Auto-Detection

        Returns:
            Transkribierter Text

        Raises:
            AuthError: Key fehlt oder wird abgelehnt
            UpstreamError: Netzwerk, HTTP-Status oder ungültige Antwort
        """
        client = self._get_client()
        size = audio_path.stat().st_size
        logger.info(
            f"OpenAI: {self.model}, {format_bytes(size)}, lang={language or 'auto'}"
        )

        with timed_operation("OpenAI-Transkription", logger=logger, include_session=False):
            with translate_api_errors("Transkription"):
                # File-Handle statt .read(): das SDK streamt den Upload
                with audio_path.open("rb") as audio_file:
                    params = {"model": self.model, "file": audio_file}
                    if language:
                        params["language"] = language
                    response = await client.audio.transcriptions.create(**params)

        text = getattr(response, "text", None)
        if not isinstance(text, str):
            raise UpstreamError(
                f"Ungültige Antwort der Transkriptions-API: {type(response).__name__}"
            )
        logger.debug(f"Ergebnis: {log_preview(text)}")
        return text


async def verify_api_key(api_key: str, *, client: AsyncOpenAI | None = None) -> bool:
    """Prüft einen API-Key mit einem günstigen Aufruf (Modell-Liste).

    Returns:
        True wenn der Key akzeptiert wird, False bei leerem oder abgelehntem Key

    Raises:
        UpstreamError: Wenn der Key wegen Netzwerk/Server nicht prüfbar ist
    """
    if not api_key or not api_key.strip():
        return False
    client = client or create_client(api_key)
    try:
        with translate_api_errors("Key-Prüfung"):
            await client.models.list()
    except AuthError:
        return False
    logger.info(f"API-Key gültig ({mask_secret(api_key)})")
    return True


__all__ = ["OpenAITranscriber", "create_client", "translate_api_errors", "verify_api_key"]
