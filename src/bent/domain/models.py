"""Core data models for bent."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Directories:
    """Resolved absolute directories shared by every configuration."""

    wd: Path
    bench_dir: Path
    test_bin_dir: Path


@dataclass(frozen=True)
class BenchStat:
    """One build-timing observation, in nanoseconds."""

    name: str
    real_ns: int
    user_ns: int
    sys_ns: int


@dataclass
class Benchmark:
    """A named unit of source code to compile and execute."""

    name: str
    repo: str
    build_dir: Path = field(default_factory=Path.cwd)
    build_flags: list[str] = field(default_factory=lambda: list[str]())
    gc_env: list[str] = field(default_factory=lambda: list[str]())
    tests: str = ""
    benchmarks: str = "."
    run_env: list[str] = field(default_factory=lambda: list[str]())
    run_wrapper: list[str] = field(default_factory=lambda: list[str]())
    not_sandboxed: bool = False
    disabled: bool = False


@dataclass
class Configuration:
    """A named build/run profile.

    Instances live for the whole process: ``build_stats`` accumulates
    across every benchmark built under the configuration, and
    ``disabled`` is only ever switched on.
    """

    name: str
    root: str = ""
    build_flags: list[str] = field(default_factory=lambda: list[str]())
    after_build: list[str] = field(default_factory=lambda: list[str]())
    gc_flags: str = ""
    gc_env: list[str] = field(default_factory=lambda: list[str]())
    run_flags: list[str] = field(default_factory=lambda: list[str]())
    run_env: list[str] = field(default_factory=lambda: list[str]())
    run_wrapper: list[str] = field(default_factory=lambda: list[str]())
    disabled: bool = False
    build_stats: list[BenchStat] = field(default_factory=lambda: list[BenchStat]())
    bench_log: Path | None = None
    root_copy: str = ""

    def bench_name(self, bench: Benchmark) -> str:
        """Return the test binary name for *bench* under this configuration."""
        return f"{bench.name}_{self.name}"

    def go_command(self) -> str:
        """Return the go command of the configured toolchain root."""
        if self.root:
            return str(Path(self.root) / "bin" / "go")
        return "go"

    def go_command_copy(self) -> str:
        """Return the go command of the private toolchain copy."""
        if self.root_copy:
            return str(Path(self.root_copy) / "bin" / "go")
        return "go"

    def target_goarch(self) -> str:
        """Return the GOARCH this configuration compiles for, or "" for the host."""
        value = ""
        for entry in self.gc_env:
            key, sep, val = entry.partition("=")
            if sep and key == "GOARCH":
                value = val
        return value


@dataclass(frozen=True)
class RunOptions:
    """Process-wide settings shared by every build and run."""

    dirs: Directories
    runstamp: str
    verbose: int = 0
    rebuild_all: bool = False
    base_env: dict[str, str] = field(default_factory=lambda: dict(os.environ))


@dataclass
class Command:
    """An external process to launch."""

    path: str
    args: list[str] = field(default_factory=lambda: list[str]())
    env: dict[str, str] = field(default_factory=lambda: dict[str, str]())
    cwd: Path | None = None

    @property
    def argv(self) -> list[str]:
        return [self.path, *self.args]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of running a command to completion.

    An empty ``diagnostic`` means success. ``exit_code`` is reported in
    every case, including launch failures where it stays 0.
    """

    diagnostic: str
    exit_code: int = 0
    user_ns: int = 0
    sys_ns: int = 0

    @property
    def ok(self) -> bool:
        return self.diagnostic == ""


_WORD_START = re.compile(r"(?<!\w)\w")


def title(name: str) -> str:
    """Upper-case the first letter of every word in *name*.

    Unlike ``str.title`` the remaining letters keep their case, so
    ``"fmtSprintf"`` becomes ``"FmtSprintf"``.
    """
    return _WORD_START.sub(lambda m: m.group().upper(), name)
