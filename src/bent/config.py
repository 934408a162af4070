"""Path constants and run-directory layout."""

from datetime import UTC, datetime
from pathlib import Path

from bent.domain.models import Directories

# Layout under the working directory
BENCH_DIR = "bench"
TESTBIN_DIR = "testbin"
GOPATH_DIR = "gopath"
GOROOTS_DIR = "goroots"
SUITE_FILE = "suite.yaml"
LOG_FILE = "bent.log"

# Sandbox target forced on benchmarks that do not opt out
SANDBOX_GOOS = "linux"

# Log file suffixes
BUILD_SUFFIX = "build"
STDOUT_SUFFIX = "stdout"

# Exit status when the build log cannot be reopened
EXIT_BUILD_LOG = 2


def directories(wd: Path) -> Directories:
    """Return the run directories rooted at *wd*."""
    wd = wd.resolve()
    return Directories(
        wd=wd,
        bench_dir=wd / BENCH_DIR,
        test_bin_dir=wd / TESTBIN_DIR,
    )


def gopath_dir(cwd: Path) -> Path:
    """Return the build-scratch directory used for cache cleaning."""
    return cwd / GOPATH_DIR


def goroot_copy_dir(dirs: Directories, config_name: str) -> Path:
    """Return where a configuration's toolchain root is copied."""
    return dirs.wd / GOROOTS_DIR / config_name


def new_runstamp() -> str:
    """Return a timestamp identifying this run's log files."""
    return datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%S")
