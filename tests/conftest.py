"""Shared pytest fixtures for bent tests.

Provides run options rooted in ``tmp_path`` and factory fixtures for
configurations and benchmarks, so each test only spells out what it
cares about.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest

from bent.config import directories
from bent.console import configure
from bent.domain.models import Benchmark, Configuration, RunOptions
from bent.logsink import create_files_for_later

RUNSTAMP = "20260101T000000"


@pytest.fixture(autouse=True)
def plain_console() -> None:
    """Every test writes through the plain backend so capsys sees it."""
    configure(backend="plain")


@pytest.fixture()
def opts(tmp_path: Path) -> RunOptions:
    """RunOptions with bench and testbin directories created under tmp_path."""
    dirs = directories(tmp_path)
    dirs.bench_dir.mkdir()
    dirs.test_bin_dir.mkdir()
    return RunOptions(
        dirs=dirs,
        runstamp=RUNSTAMP,
        base_env={"GOOS": "darwin", "PATH": os.environ.get("PATH", "")},
    )


@pytest.fixture()
def make_configuration() -> _ConfigurationFactory:
    """Factory for Configuration with sensible defaults."""

    def _factory(name: str = "baseline", **overrides: Any) -> Configuration:
        return Configuration(name=name, **overrides)

    return _factory


_ConfigurationFactory = Any


@pytest.fixture()
def make_benchmark(tmp_path: Path) -> _BenchmarkFactory:
    """Factory for Benchmark with sensible defaults, built in tmp_path."""

    def _factory(name: str = "fib", **overrides: Any) -> Benchmark:
        defaults: dict[str, Any] = {
            "repo": "example/fib",
            "build_dir": tmp_path,
        }
        defaults.update(overrides)
        return Benchmark(name=name, **defaults)

    return _factory


_BenchmarkFactory = Any


@pytest.fixture()
def prepared_config(make_configuration: Any, opts: RunOptions) -> _PreparedFactory:
    """Factory for a Configuration whose log files already exist."""

    def _factory(name: str = "baseline", **overrides: Any) -> Configuration:
        config: Configuration = make_configuration(name, **overrides)
        create_files_for_later(config, opts)
        return config

    return _factory


_PreparedFactory = Any


@pytest.fixture()
def python_env() -> dict[str, str]:
    """Environment for child Python processes."""
    return dict(os.environ)

