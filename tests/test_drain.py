"""Tests for bent.runner.drain.StreamDrainer."""

from __future__ import annotations

import io
import threading
from unittest.mock import patch

import pytest

from bent.runner.drain import StreamDrainer


class RecordingSink:
    """LogSink stand-in that remembers every chunk written."""

    def __init__(self, fail: bool = False) -> None:
        self.chunks: list[bytes] = []
        self._fail = fail

    def write(self, chunk: bytes) -> int:
        if self._fail:
            msg = "disk full"
            raise OSError(msg)
        self.chunks.append(chunk)
        return len(chunk)


class BrokenStream:
    """Yields the given lines, then fails."""

    def __init__(self, lines: list[bytes]) -> None:
        self._lines = list(lines)

    def readline(self) -> bytes:
        if self._lines:
            return self._lines.pop(0)
        msg = "read failed"
        raise OSError(msg)


def _drain(stream: object, sink: object) -> tuple[StreamDrainer, BaseException | None]:
    drainer = StreamDrainer("stdout", stream, sink, threading.Lock())  # type: ignore[arg-type]
    err = drainer.start().wait()
    return drainer, err


class TestStreamDrainer:
    def test_copies_lines_in_order(self) -> None:
        sink = RecordingSink()
        _, err = _drain(io.BytesIO(b"one\ntwo\nthree\n"), sink)
        assert err is None
        assert sink.chunks == [b"one\n", b"two\n", b"three\n"]

    def test_unterminated_tail_is_copied(self) -> None:
        sink = RecordingSink()
        _drain(io.BytesIO(b"line\npartial"), sink)
        assert sink.chunks == [b"line\n", b"partial"]

    def test_empty_stream(self) -> None:
        sink = RecordingSink()
        _, err = _drain(io.BytesIO(b""), sink)
        assert err is None
        assert sink.chunks == []

    def test_bytes_copied_exactly(self) -> None:
        data = b"\xff\xfe binary \x00\n\r\nend"
        sink = RecordingSink()
        _drain(io.BytesIO(data), sink)
        assert b"".join(sink.chunks) == data

    def test_echoes_to_console(self, capsys: pytest.CaptureFixture[str]) -> None:
        _drain(io.BytesIO(b"BenchmarkFib-8 100 12 ns/op\n"), RecordingSink())
        assert "BenchmarkFib-8 100 12 ns/op\n" in capsys.readouterr().out

    def test_read_error_is_signalled(self) -> None:
        sink = RecordingSink()
        _, err = _drain(BrokenStream([b"ok\n"]), sink)
        assert isinstance(err, OSError)
        assert sink.chunks == [b"ok\n"]

    def test_write_error_does_not_stop_draining(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _, err = _drain(io.BytesIO(b"a\nb\n"), RecordingSink(fail=True))
        assert err is None
        out = capsys.readouterr().out
        assert out.count("Error writing") == 2
        assert "a\n" in out

    def test_tail_keeps_recent_chunks(self) -> None:
        lines = b"".join(f"line {i}\n".encode() for i in range(100))
        drainer, _ = _drain(io.BytesIO(lines), RecordingSink())
        assert drainer.tail.endswith(b"line 99\n")
        assert b"line 0\n" not in drainer.tail

    def test_writes_hold_the_shared_lock(self) -> None:
        lock = threading.Lock()
        held: list[bool] = []

        class LockCheckingSink(RecordingSink):
            def write(self, chunk: bytes) -> int:
                held.append(lock.locked())
                return super().write(chunk)

        drainer = StreamDrainer("stderr", io.BytesIO(b"x\ny\n"), LockCheckingSink(), lock)  # type: ignore[arg-type]
        drainer.start().wait()
        assert held == [True, True]
        assert not lock.locked()

    def test_echo_failure_does_not_stop_draining(self) -> None:
        sink = RecordingSink()
        with patch("bent.runner.drain.console.echo", side_effect=BrokenPipeError(32, "Broken pipe")):
            _, err = _drain(io.BytesIO(b"a\nb\nc\n"), sink)
        assert err is None
        assert sink.chunks == [b"a\n", b"b\n", b"c\n"]

    def test_unexpected_error_still_signals_completion(self) -> None:
        class ExplodingSink(RecordingSink):
            def write(self, chunk: bytes) -> int:
                msg = "sink bug"
                raise RuntimeError(msg)

        _, err = _drain(io.BytesIO(b"x\n"), ExplodingSink())
        assert isinstance(err, RuntimeError)
