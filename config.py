"""Zentrale Konfiguration für FloatScribe.

Gemeinsame Konstanten für Audio, API-Aufrufe und Dateipfade.
Vermeidet Duplikation zwischen Modulen.
"""

from pathlib import Path

# =============================================================================
# Audio-Konfiguration
# =============================================================================

# Whisper erwartet Audio mit 16kHz – andere Sampleraten führen zu schlechteren Ergebnissen
SAMPLE_RATE = 16000
CHANNELS = 1
SAMPLE_WIDTH = 2  # int16
CHUNK_MS = 100  # Ein Chunk alle 100ms

# Maximaler int16-Betrag, Referenz für den Pegel (0–100)
INT16_MAX = 32767

# Maximale Wartezeit bis das Mikrofon freigegeben wird
DEVICE_OPEN_TIMEOUT = 3.0
# PortAudio kann beim close() hängen
DEVICE_CLOSE_TIMEOUT = 2.0

# =============================================================================
# API-Konfiguration
# =============================================================================

DEFAULT_TRANSCRIBE_MODEL = "whisper-1"
DEFAULT_REPHRASE_MODEL = "gpt-4o-mini"
REPHRASE_TEMPERATURE = 0.2
REPHRASE_MAX_TOKENS = 2048
REQUEST_TIMEOUT = 60.0

DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "nl")

# =============================================================================
# Scratch-Dateien
# =============================================================================

TEMP_RECORDING_PREFIX = "recording-"
TEMP_RECORDING_SUFFIX = ".wav"

# =============================================================================
# Lokale Pfade
# =============================================================================

# User-Verzeichnis für Einstellungen und Logs
USER_CONFIG_DIR = Path.home() / ".floatscribe"

LOG_DIR = USER_CONFIG_DIR / "logs"
LOG_FILE = LOG_DIR / "floatscribe.log"

SETTINGS_FILE = USER_CONFIG_DIR / "settings.json"


__all__ = [
    # Audio
    "SAMPLE_RATE",
    "CHANNELS",
    "SAMPLE_WIDTH",
    "CHUNK_MS",
    "INT16_MAX",
    "DEVICE_OPEN_TIMEOUT",
    "DEVICE_CLOSE_TIMEOUT",
    # API
    "DEFAULT_TRANSCRIBE_MODEL",
    "DEFAULT_REPHRASE_MODEL",
    "REPHRASE_TEMPERATURE",
    "REPHRASE_MAX_TOKENS",
    "REQUEST_TIMEOUT",
    "DEFAULT_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    # Scratch
    "TEMP_RECORDING_PREFIX",
    "TEMP_RECORDING_SUFFIX",
    # Paths
    "USER_CONFIG_DIR",
    "LOG_DIR",
    "LOG_FILE",
    "SETTINGS_FILE",
]
