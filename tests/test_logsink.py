"""Tests for bent.logsink -- log file creation and append discipline."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any
from unittest.mock import patch

import pytest

from bent.domain.models import RunOptions
from bent.logsink import (
    LogSink,
    append_bytes,
    build_bench_name,
    create_files_for_later,
    say,
    thing_bench_name,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestNames:
    def test_build_bench_name(self, make_configuration: Any, opts: RunOptions) -> None:
        path = build_bench_name(make_configuration("tip"), opts)
        assert path == opts.dirs.bench_dir / "20260101T000000.tip.build"

    def test_thing_bench_name_uses_basename(self, make_configuration: Any, opts: RunOptions) -> None:
        path = thing_bench_name(make_configuration("tip"), opts, "/usr/local/bin/benchsize")
        assert path.name == "20260101T000000.tip.benchsize"


class TestCreateFilesForLater:
    def test_build_log_header(self, make_configuration: Any, opts: RunOptions) -> None:
        config = make_configuration()
        with (
            patch("bent.logsink.host_goos", return_value="linux"),
            patch("bent.logsink.host_goarch", return_value="amd64"),
        ):
            create_files_for_later(config, opts)
        assert build_bench_name(config, opts).read_text() == "goos: linux\ngoarch: amd64\n"
        assert not config.disabled

    def test_creates_after_build_and_results_logs(
        self, make_configuration: Any, opts: RunOptions
    ) -> None:
        config = make_configuration(after_build=["benchsize", "tools/benchdwarf"])
        create_files_for_later(config, opts)
        assert thing_bench_name(config, opts, "benchsize").read_bytes() == b""
        assert thing_bench_name(config, opts, "benchdwarf").read_bytes() == b""
        assert config.bench_log == thing_bench_name(config, opts, "stdout")
        assert config.bench_log is not None and config.bench_log.exists()

    def test_unwritable_bench_dir_disables_configuration(
        self, make_configuration: Any, opts: RunOptions, tmp_path: Path
    ) -> None:
        broken = replace(opts, dirs=replace(opts.dirs, bench_dir=tmp_path / "missing"))
        config = make_configuration()
        create_files_for_later(config, broken)
        assert config.disabled
        assert config.bench_log is None

    def test_disabled_configuration_is_skipped(
        self, make_configuration: Any, opts: RunOptions
    ) -> None:
        config = make_configuration(disabled=True)
        create_files_for_later(config, opts)
        assert not build_bench_name(config, opts).exists()


class TestAppendBytes:
    def test_writes_in_call_order(self, tmp_path: Path) -> None:
        path = tmp_path / "log"
        path.write_bytes(b"header\n")
        chunks = [b"one\n", b"two", b" still two\n", b"\x00\xff"]
        for c in chunks:
            append_bytes(path, c)
        assert path.read_bytes() == b"header\n" + b"".join(chunks)

    def test_does_not_create_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            append_bytes(tmp_path / "nope", b"x")
        assert not (tmp_path / "nope").exists()


class TestLogSink:
    def test_appends_and_closes(self, tmp_path: Path) -> None:
        path = tmp_path / "out"
        path.write_bytes(b"a\n")
        with LogSink(path) as sink:
            sink.write(b"b\n")
            sink.write(b"c")
        assert path.read_bytes() == b"a\nb\nc"

    def test_without_path_discards(self) -> None:
        with LogSink(None) as sink:
            assert sink.write(b"ignored") == len(b"ignored")

    def test_open_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            LogSink(tmp_path / "missing").open()


class TestSay:
    def test_appends_and_echoes(
        self, prepared_config: Any, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = prepared_config()
        say(config, "shortname: fib\n")
        assert config.bench_log.read_text() == "shortname: fib\n"
        assert "shortname: fib\n" in capsys.readouterr().out
