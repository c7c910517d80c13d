"""Audio-Modul für FloatScribe.

Mikrofon-Aufnahme, Chunk-Puffer und Scratch-Dateien.

Usage:
    from audio import AudioCapture, ChunkBuffer, staged_audio

    buffer = ChunkBuffer()
    async with AudioCapture() as capture:
        async for chunk in capture.chunks():
            buffer.append(chunk.data)

    async with staged_audio(buffer.drain()) as path:
        ...
"""

from .buffer import ChunkBuffer
from .capture import AudioCapture, AudioChunk, compute_level
from .staging import stage_audio, staged_audio, unstage_audio

__all__ = [
    "AudioCapture",
    "AudioChunk",
    "ChunkBuffer",
    "compute_level",
    "stage_audio",
    "staged_audio",
    "unstage_audio",
]
