# ABOUTME: Bounded capture of a spawned server's stderr output
# ABOUTME: Keeps the newest chunks only, for appending to failure messages
import io
from collections import deque
from typing import IO

# Maximum number of chunks retained
MAX_CHUNKS = 50

# Maximum characters reported from the end of the captured output
TAIL_CHARS = 2000

READ_CHUNK_BYTES = 4096


class DiagnosticsSink:
    """Ring buffer of raw stderr chunks for one attempt.

    ABOUTME: Oldest chunks are dropped once MAX_CHUNKS is reached
    ABOUTME: Owned by a single attempt, never shared
    """

    def __init__(self, max_chunks: int = MAX_CHUNKS) -> None:
        self._max_chunks = max_chunks
        self._chunks: deque[bytes] = deque(maxlen=max_chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def write(self, chunk: bytes | str) -> None:
        """Append one chunk, dropping the oldest when full."""
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        if chunk:
            self._chunks.append(chunk)

    def drain(self, stream: IO[bytes]) -> None:
        """Read the end of a seekable stream into the buffer.

        ABOUTME: Only the newest max_chunks * READ_CHUNK_BYTES bytes are read
        """
        size = stream.seek(0, io.SEEK_END)
        stream.seek(max(0, size - self._max_chunks * READ_CHUNK_BYTES))
        while True:
            chunk = stream.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            self.write(chunk)

    def tail(self, max_chars: int = TAIL_CHARS) -> str:
        """Return the decoded, stripped end of the captured output.

        Examples:
            >>> sink = DiagnosticsSink()
            >>> sink.write(b"ModuleNotFoundError: foo\\n")
            >>> sink.tail()
            'ModuleNotFoundError: foo'
        """
        text = b"".join(self._chunks).decode("utf-8", errors="replace").strip()
        if len(text) <= max_chars:
            return text
        return text[-max_chars:]

    def annotate(self, error: str) -> str:
        """Append the stderr tail to an error message when there is one."""
        tail = self.tail()
        if not tail:
            return error
        return f"{error} | stderr: {tail}"
