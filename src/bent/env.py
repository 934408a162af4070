"""Environment layering and command-line rendering helpers."""

import logging
import os
import platform
import shlex
import sys
from pathlib import Path

from bent.config import SANDBOX_GOOS
from bent.domain.models import Benchmark, Command, Configuration

logger = logging.getLogger(__name__)

_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
    "riscv64": "riscv64",
    "mips64": "mips64",
    "loongarch64": "loong64",
}


def default_env() -> dict[str, str]:
    """Return a copy of the current process environment."""
    return dict(os.environ)


def replace_env(env: dict[str, str], key: str, value: str) -> dict[str, str]:
    """Return a copy of *env* with *key* set to *value*.

    The key is moved to the end so the rendered environment shows
    overrides in the order they were applied.
    """
    result = {k: v for k, v in env.items() if k != key}
    result[key] = value
    return result


def replace_envs(env: dict[str, str], overrides: list[str]) -> dict[str, str]:
    """Apply ``KEY=VALUE`` *overrides* to *env* in order; later entries win."""
    result = env
    for entry in overrides:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            logger.warning("Ignoring malformed environment entry %r", entry)
            continue
        result = replace_env(result, key, value)
    return result


def getenv(overrides: list[str], key: str) -> str:
    """Return the value *overrides* assign to *key*, or ""."""
    value = ""
    for entry in overrides:
        k, sep, v = entry.partition("=")
        if sep and k == key:
            value = v
    return value


def host_goos() -> str:
    """Return the host operating system, spelled the way Go spells it."""
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "win32":
        return "windows"
    return sys.platform.rstrip("0123456789")


def host_goarch() -> str:
    """Return the host architecture, spelled the way Go spells it."""
    machine = platform.machine().lower()
    return _GOARCH.get(machine, machine)


def as_command_line(cwd: Path | str, cmd: Command) -> str:
    """Render *cmd* as a shell line that could be pasted to rerun it.

    Only environment variables that differ from this process's own
    environment are shown.
    """
    parts: list[str] = []
    if cmd.cwd is not None:
        directory = str(cmd.cwd)
        if cwd:
            try:
                directory = os.path.relpath(cmd.cwd, cwd)
            except ValueError:
                pass
        parts.append(f"cd {shlex.quote(directory)};")
    for key, value in cmd.env.items():
        if os.environ.get(key) != value:
            parts.append(f"{key}={shlex.quote(value)}")
    parts.extend(shlex.quote(a) for a in cmd.argv)
    return " ".join(parts)


def build_env(
    base: dict[str, str],
    bench: Benchmark,
    config: Configuration,
    *,
    root: str = "",
) -> dict[str, str]:
    """Return the environment for compiling *bench* under *config*.

    Layers, later winning: *base*; ``GOOS`` forced to the sandbox target
    unless the benchmark opts out; ``GOROOT`` when *root* is given; the
    benchmark's overrides; the configuration's overrides.
    """
    env = base
    if not bench.not_sandboxed:
        env = replace_env(env, "GOOS", SANDBOX_GOOS)
    if root:
        env = replace_env(env, "GOROOT", root)
    env = replace_envs(env, bench.gc_env)
    return replace_envs(env, config.gc_env)
