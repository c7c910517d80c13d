"""Transkriptions-Provider für FloatScribe.

Usage:
    from providers import get_provider

    provider = get_provider("openai", "sk-...")
    text = await provider.transcribe(audio_path, language="en")

Unterstützte Provider:
    - openai: OpenAI Whisper API (whisper-1)
"""

from typing import TYPE_CHECKING

from config import DEFAULT_TRANSCRIBE_MODEL

if TYPE_CHECKING:
    from interfaces import SpeechToText

# Default-Modelle pro Provider
DEFAULT_MODELS = {
    "openai": DEFAULT_TRANSCRIBE_MODEL,
}


def get_provider(mode: str, api_key: str, *, model: str | None = None) -> "SpeechToText":
    """Factory für Transkriptions-Provider.

    Raises:
        ValueError: Bei unbekanntem Provider
    """
    if mode == "openai":
        from .openai import OpenAITranscriber

        return OpenAITranscriber(api_key, model=model)
    supported = ", ".join(sorted(DEFAULT_MODELS))
    raise ValueError(f"Unbekannter Provider: {mode} (unterstützt: {supported})")


__all__ = [
    "get_provider",
    "DEFAULT_MODELS",
]
