"""After-build measurements: size, debug-info quality and the like.

Each configured command is run against the freshly built test binary
and its combined output appended to that command's own log. Failures
are reported and skipped; they never disable a benchmark.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from bent.console import console
from bent.domain.models import Benchmark, Command, Configuration, RunOptions
from bent.env import as_command_line, build_env
from bent.logsink import append_bytes, thing_bench_name

logger = logging.getLogger(__name__)


def resolve_command(cmd: str, cwd: Path) -> str:
    """Commands given without a path separator live in *cwd*."""
    if "/" not in cmd:
        return str(cwd / cmd)
    return cmd


def run_other_benchmarks(
    config: Configuration, bench: Benchmark, cwd: Path, opts: RunOptions
) -> None:
    """Run every after-build command of *config* against *bench*'s binary."""
    if config.disabled:
        return

    for name in config.after_build:
        tbn = thing_bench_name(config, opts, name)
        if not tbn.is_file():
            console.warning(f"There was an error opening {tbn} for append, file does not exist")
            continue
        if bench.disabled:
            continue

        test_binary = opts.dirs.test_bin_dir / config.bench_name(bench)
        cmd = Command(
            resolve_command(name, cwd),
            [str(test_binary), bench.name],
            env=build_env(opts.base_env, bench, config),
        )
        if opts.verbose > 0:
            console.command(as_command_line(cwd, cmd))

        try:
            proc = subprocess.run(
                cmd.argv,
                env=cmd.env or None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            console.warning(f"Error running {cmd.path}: {exc}")
            logger.warning("After-build command %s failed to start: %s", cmd.path, exc)
            continue

        output = proc.stdout
        if opts.verbose > 0 or proc.returncode != 0:
            console.echo(output.decode(errors="replace") + "\n")
        else:
            console.progress()
        if proc.returncode != 0:
            console.warning(f"Error running {cmd.path}")
            logger.warning("After-build command %s exited %d", cmd.path, proc.returncode)
            continue

        try:
            append_bytes(tbn, output)
        except OSError as exc:
            console.warning(f"There was an error opening {tbn} for append, error {exc}")
            continue
        logger.debug("Appended %d bytes from %s to %s", len(output), os.path.basename(name), tbn)
