"""
Gemeinsame Test-Fixtures für FloatScribe.

Diese Fixtures isolieren Tests von externen Abhängigkeiten:
- Mikrofon (FakeCapture statt sounddevice)
- OpenAI (FakeTranscriber / FakeRephraser statt Netzwerk)
- Dateisystem (Scratch-Verzeichnis, Settings-Datei)
- Umgebungsvariablen (API-Keys)
"""

import asyncio
import sys
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

# Projekt-Root zum Python-Path hinzufügen
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from audio.capture import AudioChunk  # noqa: E402


# =============================================================================
# Fakes
# =============================================================================


class FakeCapture:
    """Verhält sich wie AudioCapture, Chunks kommen per push() statt vom Mikrofon."""

    def __init__(self, fail: Exception | None = None):
        self.fail = fail
        self.opened = False
        self.closed = False
        # Simuliert ein langsames Freigeben des Geräts
        self.close_delay = 0.0
        self._queue: asyncio.Queue | None = None

    async def open(self) -> None:
        if self.fail is not None:
            raise self.fail
        self._queue = asyncio.Queue()
        self.opened = True

    def push(self, data: bytes, level: float = 12.5) -> None:
        # Wie AudioCapture: nach close() werden Chunks verworfen
        if self.closed:
            return
        self._queue.put_nowait(AudioChunk(data=data, level=level, timestamp=time.time()))

    async def chunks(self):
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        if self._queue is not None:
            self._queue.put_nowait(None)


class CaptureFactory:
    """Erzeugt FakeCaptures und merkt sich alle Instanzen."""

    def __init__(self):
        self.fail: Exception | None = None
        self.created: list[FakeCapture] = []

    def __call__(self) -> FakeCapture:
        capture = FakeCapture(fail=self.fail)
        self.created.append(capture)
        return capture

    @property
    def last(self) -> FakeCapture:
        return self.created[-1]


class FakeTranscriber:
    """Liest die Scratch-Datei beim Upload, damit Tests den Inhalt prüfen können."""

    def __init__(self, text: str = "hello world", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []
        self.block: asyncio.Event | None = None

    async def transcribe(self, audio_path: Path, *, language: str | None = None) -> str:
        import soundfile as sf

        samples, rate = sf.read(audio_path, dtype="int16")
        self.calls.append(
            {
                "path": audio_path,
                "language": language,
                "exists": audio_path.exists(),
                "rate": rate,
                "pcm": samples.tobytes(),
            }
        )
        if self.block is not None:
            await self.block.wait()
        if self.error is not None:
            raise self.error
        return self.text


class FakeRephraser:
    def __init__(self, result: str = "Rephrased.", error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[dict] = []

    async def rephrase(self, text, *, model=None, prompt=None):
        self.calls.append({"text": text, "model": model, "prompt": prompt})
        if self.error is not None:
            raise self.error
        return self.result


def pcm(size: int, value: int = 1000) -> bytes:
    """int16-PCM mit konstantem Wert; size in Bytes (gerade)."""
    return value.to_bytes(2, "little", signed=True) * (size // 2)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def capture_factory():
    return CaptureFactory()


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def rephraser():
    return FakeRephraser()


@pytest.fixture
def scratch_dir(tmp_path, monkeypatch):
    """Leitet tempfile.gettempdir() auf ein leeres Testverzeichnis um."""
    import tempfile

    directory = tmp_path / "scratch"
    directory.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(directory))
    return directory


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    """Ersetzt den Settings-Pfad durch eine temporäre Datei."""
    import utils.preferences

    path = tmp_path / "settings.json"
    monkeypatch.setattr(utils.preferences, "SETTINGS_FILE", path)
    return path


@pytest.fixture
def clean_env(monkeypatch):
    """Entfernt OPENAI_API_KEY und alle FLOATSCRIBE_* Variablen."""
    import os

    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    for key in list(os.environ.keys()):
        if key.startswith("FLOATSCRIBE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_sounddevice(monkeypatch):
    """Ersetzt sounddevice, damit Tests ohne PortAudio laufen."""
    sd = Mock()
    sd.PortAudioError = type("PortAudioError", (Exception,), {})
    monkeypatch.setitem(sys.modules, "sounddevice", sd)
    return sd


@pytest.fixture
def make_pcm():
    return pcm
