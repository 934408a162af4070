"""Per-configuration log files.

Every configuration owns three kinds of append-only files under the
bench directory, all named ``<runstamp>.<config>.<suffix>``:

- the build log (``.build``), benchstat-formatted build timings;
- the results log (``.stdout``), everything the commands printed;
- one file per after-build command, named after the command.

Files are created once by :func:`create_files_for_later` and from then
on only appended to. No handle outlives a single write (build and
after-build logs) or a single command invocation (results log), so
external tools can tail them while a run is in progress.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType
from typing import BinaryIO

from bent.config import BUILD_SUFFIX, STDOUT_SUFFIX
from bent.console import console
from bent.domain.models import Configuration, RunOptions
from bent.env import host_goarch, host_goos

logger = logging.getLogger(__name__)


def thing_bench_name(config: Configuration, opts: RunOptions, suffix: str) -> Path:
    """Return the log path for *suffix*; only its basename is used."""
    if suffix:
        suffix = os.path.basename(suffix)
    return opts.dirs.bench_dir / f"{opts.runstamp}.{config.name}.{suffix}"


def build_bench_name(config: Configuration, opts: RunOptions) -> Path:
    """Return the build log path for *config*."""
    return thing_bench_name(config, opts, BUILD_SUFFIX)


def create_files_for_later(config: Configuration, opts: RunOptions) -> None:
    """Create the configuration's log files, to be appended to later.

    Failing to create the build or results log disables the
    configuration. An after-build log that cannot be created is
    reported and left for :func:`bent.build.after.run_other_benchmarks`
    to skip.
    """
    if config.disabled:
        return

    build_log = build_bench_name(config, opts)
    try:
        with build_log.open("w", encoding="utf-8") as f:
            f.write(f"goos: {host_goos()}\n")
            f.write(f"goarch: {host_goarch()}\n")
    except OSError as exc:
        console.error(f"Error creating build benchmark file {build_log}, err={exc}")
        logger.error("Disabling configuration %s: %s", config.name, exc)
        config.disabled = True
        return

    for cmd in config.after_build:
        tbn = thing_bench_name(config, opts, cmd)
        try:
            tbn.touch()
        except OSError as exc:
            console.error(f"Error creating {cmd} benchmark file {tbn}, err={exc}")
            continue

    results = thing_bench_name(config, opts, STDOUT_SUFFIX)
    try:
        results.touch()
    except OSError as exc:
        console.error(f"Error creating benchmark output file {results}, err={exc}")
        logger.error("Disabling configuration %s: %s", config.name, exc)
        config.disabled = True
        return
    config.bench_log = results


def _sync(f: BinaryIO) -> None:
    f.flush()
    os.fsync(f.fileno())


def append_bytes(path: Path, data: bytes) -> None:
    """Append *data* to an existing file and force it to disk.

    Raises ``OSError`` when the file cannot be opened for append; the
    file is never created here.
    """
    fd = os.open(path, os.O_WRONLY | os.O_APPEND)
    with os.fdopen(fd, "ab") as f:
        f.write(data)
        _sync(f)


class LogSink:
    """The results log of one configuration, open for one invocation.

    Use as a context manager::

        with LogSink(config.bench_log) as sink:
            sink.write(b"BenchmarkFoo 1 2 ns/op\\n")

    A sink without a path discards writes.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._file: BinaryIO | None = None

    def open(self) -> LogSink:
        if self._path is not None and self._file is None:
            fd = os.open(self._path, os.O_WRONLY | os.O_APPEND)
            self._file = os.fdopen(fd, "ab")
        return self

    def write(self, chunk: bytes) -> int:
        """Write *chunk* and force it to durable storage."""
        if self._file is None:
            return len(chunk)
        n = self._file.write(chunk)
        _sync(self._file)
        return n

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> LogSink:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def say(config: Configuration, text: str) -> None:
    """Append *text* to the configuration's results log and echo it."""
    data = text.encode()
    if config.bench_log is not None:
        try:
            append_bytes(config.bench_log, data)
        except OSError as exc:
            console.error(f"Error writing, err = {exc}, nrequested = {len(data)}")
    console.echo(text)
