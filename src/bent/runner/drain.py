"""Concurrent copying of a child's output streams into a shared log sink.

Each invocation gets two drainers, one per stream, sharing one lock.
A chunk (one line, or the unterminated tail of a stream) is written to
the sink, synced and echoed to the console while holding the lock, so
stdout and stderr chunks never interleave inside each other. The
relative order of stdout and stderr chunks is not defined.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from typing import IO, TYPE_CHECKING

from bent.console import console

if TYPE_CHECKING:
    from bent.logsink import LogSink

logger = logging.getLogger(__name__)

_TAIL_CHUNKS = 20


class StreamDrainer:
    """Copies one readable byte stream into *sink* on a worker thread."""

    def __init__(
        self,
        name: str,
        stream: IO[bytes],
        sink: LogSink,
        lock: threading.Lock,
    ) -> None:
        self.name = name
        self._stream = stream
        self._sink = sink
        self._lock = lock
        self._done: queue.Queue[BaseException | None] = queue.Queue(maxsize=1)
        self._tail: deque[bytes] = deque(maxlen=_TAIL_CHUNKS)
        self._thread = threading.Thread(
            target=self._run,
            name=f"drain-{name}",
            daemon=True,
        )

    def start(self) -> StreamDrainer:
        self._thread.start()
        return self

    def wait(self) -> BaseException | None:
        """Block until the stream is drained; return the read error, if any."""
        err = self._done.get()
        self._thread.join()
        return err

    @property
    def tail(self) -> bytes:
        """The last chunks this drainer copied."""
        return b"".join(self._tail)

    def _run(self) -> None:
        err: BaseException | None = None
        try:
            self._drain()
        except (OSError, ValueError) as exc:
            logger.warning("Read error on %s: %s", self.name, exc)
            err = exc
        except Exception as exc:
            logger.exception("Drainer for %s stopped", self.name)
            err = exc
        finally:
            self._done.put(err)

    def _drain(self) -> None:
        while True:
            chunk = self._stream.readline()
            if not chunk:
                return
            self._tail.append(chunk)
            with self._lock:
                self._copy(chunk)

    def _copy(self, chunk: bytes) -> None:
        try:
            self._sink.write(chunk)
        except OSError as exc:
            console.error(f"Error writing, err = {exc}, nrequested = {len(chunk)}")
            logger.error("Sink write failed for %s: %s", self.name, exc)
        # Echo failures never end the drain; the pipe must keep emptying.
        try:
            console.echo(chunk.decode(errors="replace"))
        except (OSError, ValueError) as exc:
            logger.warning("Echo failed for %s: %s", self.name, exc)
