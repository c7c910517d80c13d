from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class SessionState(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    FINALIZING = "finalizing"  # Stream geschlossen, Upload läuft


class MessageType(Enum):
    STATUS_UPDATE = auto()
    AUDIO_LEVEL = auto()
    TRANSCRIPT_RESULT = auto()
    REPHRASE_RESULT = auto()
    ERROR = auto()
    NEEDS_CREDENTIALS = auto()  # UI soll Einstellungen öffnen


@dataclass(frozen=True)
class AudioLevelSample:
    timestamp: float
    level: float  # 0–100


@dataclass
class AppEvent:
    type: MessageType
    payload: Any = None
