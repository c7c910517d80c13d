"""Chunk-Puffer für eine Aufnahme.

Sammelt PCM-Chunks in Ankunftsreihenfolge. Kein Thread-Sharing:
einziger Besitzer ist die RecordingSession.
"""

import time


class ChunkBuffer:
    """Geordneter In-Memory-Puffer mit Byte-Zähler.

    drain() ist pro Aufnahme genau einmal erlaubt, danach muss reset()
    folgen, bevor wieder angehängt werden kann.
    """

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._total_bytes = 0
        self._drained = False
        self.started_at = time.time()
        self._start_perf = time.perf_counter()

    def append(self, chunk: bytes) -> None:
        if self._drained:
            raise RuntimeError("Buffer wurde bereits geleert – reset() fehlt")
        if not chunk:
            return
        self._chunks.append(bytes(chunk))
        self._total_bytes += len(chunk)

    def drain(self) -> bytes:
        """Gibt alle Chunks konkateniert zurück (nur einmal gültig)."""
        if self._drained:
            raise RuntimeError("Buffer wurde bereits geleert")
        self._drained = True
        return b"".join(self._chunks)

    def reset(self) -> None:
        self._chunks = []
        self._total_bytes = 0
        self._drained = False
        self.started_at = time.time()
        self._start_perf = time.perf_counter()

    @property
    def total_bytes(self) -> int:
        return self._total_bytes

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    @property
    def is_drained(self) -> bool:
        return self._drained

    @property
    def duration(self) -> float:
        """Sekunden seit Start bzw. letztem reset()."""
        return time.perf_counter() - self._start_perf


__all__ = ["ChunkBuffer"]
