"""Executing a built benchmark binary."""

from __future__ import annotations

import logging
from pathlib import Path

from bent.domain.models import Benchmark, Command, Configuration, RunOptions
from bent.env import replace_envs
from bent.logsink import say
from bent.runner.command import run_binary

logger = logging.getLogger(__name__)


def run_command(config: Configuration, bench: Benchmark, opts: RunOptions) -> Command:
    """Return the invocation that runs *bench*'s benchmarks under *config*.

    Wrappers come first, outermost (the configuration's) leading.
    """
    test_binary = opts.dirs.test_bin_dir / config.bench_name(bench)
    argv = [
        *config.run_wrapper,
        *bench.run_wrapper,
        str(test_binary),
        f"-test.run={bench.tests or '^$'}",
        f"-test.bench={bench.benchmarks}",
        *config.run_flags,
    ]
    env = replace_envs(opts.base_env, bench.run_env)
    env = replace_envs(env, config.run_env)
    return Command(argv[0], argv[1:], env=env, cwd=bench.build_dir)


def run_one(config: Configuration, bench: Benchmark, cwd: Path, opts: RunOptions) -> str:
    """Run *bench* under *config*; return "" or the failure text.

    Run failures are reported but never disable anything.
    """
    if bench.disabled or config.disabled:
        logger.debug("Skipping run of %s under %s", bench.name, config.name)
        return ""

    say(config, f"shortname: {bench.name}\n")
    result = run_binary(config, cwd, run_command(config, bench, opts), opts, print_working_dot=True)
    if not result.ok:
        logger.warning("Run of %s under %s failed rc=%d", bench.name, config.name, result.exit_code)
        return f"{result.diagnostic}({bench.name})\n"
    return ""
