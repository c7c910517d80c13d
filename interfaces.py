"""Protocol-Interfaces für Dependency Injection."""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator, Optional, Protocol

from audio.capture import AudioChunk


class AudioSource(Protocol):
    """Exklusiver Zugriff auf ein Aufnahmegerät."""

    async def open(self) -> None:
        """Belegt das Gerät; wirft DeviceUnavailable bei Fehlern."""

    def chunks(self) -> AsyncIterator[AudioChunk]:
        """Liefert Chunks in Ankunftsreihenfolge, bis die Quelle geschlossen wird."""

    async def close(self) -> None:
        """Gibt das Gerät frei. Mehrfacher Aufruf ist erlaubt."""


class SpeechToText(Protocol):
    """Transkribiert eine Scratch-Datei zu Text."""

    async def transcribe(self, audio_path: Path, *, language: Optional[str] = None) -> str:
        """Gibt den transkribierten Text der Datei zurück."""


class Rephraser(Protocol):
    """Formuliert Text anhand einer Anweisung um."""

    async def rephrase(
        self, text: str, *, model: Optional[str] = None, prompt: Optional[str] = None
    ) -> str:
        """Gibt den umformulierten Text zurück."""
