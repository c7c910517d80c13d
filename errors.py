"""Fehler-Taxonomie für FloatScribe.

Alle Fehler der Aufnahme-Pipeline erben von FloatScribeError, damit die
UI-Schicht sie gezielt abfangen kann.
"""

from __future__ import annotations


class FloatScribeError(RuntimeError):
    """Basisklasse für alle Pipeline-Fehler."""


class AlreadyRecording(FloatScribeError):
    """start() wurde aufgerufen, während eine Session aktiv ist."""


class NotRecording(FloatScribeError):
    """stop() wurde ohne laufende Aufnahme aufgerufen."""


class DeviceUnavailable(FloatScribeError):
    """Kein Mikrofon verfügbar oder Zugriff verweigert."""


class StagingIOError(FloatScribeError):
    """Scratch-Datei konnte nicht geschrieben werden oder ist leer."""


class AuthError(FloatScribeError):
    """API-Key fehlt oder wurde vom Upstream abgelehnt.

    Die UI leitet in diesem Fall zu den Einstellungen weiter statt zu wiederholen.
    """


class UpstreamError(FloatScribeError):
    """Netzwerkfehler, HTTP-Fehlerstatus oder ungültige Antwort vom Upstream."""


class EmptyResponse(FloatScribeError):
    """Upstream meldet Erfolg, liefert aber keinen verwertbaren Text."""


class RecordingCancelled(FloatScribeError):
    """Finalisierung wurde per cancel() abgebrochen."""


__all__ = [
    "FloatScribeError",
    "AlreadyRecording",
    "NotRecording",
    "DeviceUnavailable",
    "StagingIOError",
    "AuthError",
    "UpstreamError",
    "EmptyResponse",
    "RecordingCancelled",
]
