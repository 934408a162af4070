"""Compiling one benchmark under one configuration.

A successful build records a BenchStat on the configuration and one
benchstat-formatted line in its build log. A failed build disables the
benchmark for every configuration that follows; a benchmark that does
not compile with one toolchain is not expected to compile with another.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from bent.build.after import run_other_benchmarks
from bent.config import EXIT_BUILD_LOG, gopath_dir
from bent.console import console
from bent.domain.models import (
    Benchmark,
    BenchStat,
    Command,
    Configuration,
    RunOptions,
    title,
)
from bent.env import build_env, host_goarch
from bent.logsink import append_bytes, build_bench_name
from bent.runner.command import run_binary

logger = logging.getLogger(__name__)


def clear_cache(
    config: Configuration, bench: Benchmark, cwd: Path, opts: RunOptions
) -> None:
    """Run ``go clean -cache`` with the build environment.

    Failure is reported and otherwise ignored.
    """
    gopath = gopath_dir(cwd)
    gopath.mkdir(parents=True, exist_ok=True)
    cmd = Command(
        config.go_command_copy(),
        ["clean", "-cache"],
        env=build_env(opts.base_env, bench, config, root=config.root_copy),
        cwd=gopath,
    )
    result = run_binary(config, "", cmd, opts, print_working_dot=True)
    if not result.ok:
        console.warning(f"Error running go clean -cache, {result.diagnostic}")


def compile_command(
    config: Configuration, bench: Benchmark, opts: RunOptions
) -> Command:
    """Return the ``go test -c`` invocation that builds *bench* under *config*."""
    compile_to = opts.dirs.test_bin_dir / config.bench_name(bench)
    args = ["test", "-vet=off", "-c", "-o", str(compile_to)]
    args.extend(bench.build_flags)
    # The cache is normally cleared first, so -a is only added on request.
    if opts.rebuild_all:
        args.append("-a")
    args.extend(config.build_flags)
    if config.gc_flags:
        args.append(f"-gcflags={config.gc_flags}")
    args.append(bench.repo)
    return Command(
        config.go_command_copy(),
        args,
        env=build_env(opts.base_env, bench, config, root=config.root_copy),
        cwd=bench.build_dir,
    )


def format_build_record(config: Configuration, stat: BenchStat) -> str:
    """Return the build-log text recording *stat*.

    Configurations that cross-compile get a ``goarch: <host>-<target>``
    line first so benchstat keeps their records apart.
    """
    record = ""
    target = config.target_goarch()
    host = host_goarch()
    if target and target != host:
        record += f"goarch: {host}-{target}\n"
    record += (
        f"Benchmark{title(stat.name)} 1 {stat.real_ns} build-real-ns/op "
        f"{stat.user_ns} build-user-ns/op {stat.sys_ns} build-sys-ns/op\n"
    )
    return record


def compile_one(
    config: Configuration,
    bench: Benchmark,
    cwd: Path,
    count: int,
    opts: RunOptions,
) -> str:
    """Build *bench* under *config*; return "" or the failure text.

    *count* is the repetition number; after-build measurements only run
    on repetition 0.
    """
    if bench.disabled or config.disabled:
        logger.debug("Skipping build of %s under %s", bench.name, config.name)
        return ""

    if not opts.rebuild_all:
        clear_cache(config, bench, cwd, opts)

    cmd = compile_command(config, bench, opts)
    start = time.perf_counter_ns()
    result = run_binary(config, cwd, cmd, opts, print_working_dot=True)
    real_ns = time.perf_counter_ns() - start

    if not result.ok:
        console.error(f"{result.diagnostic} DISABLING benchmark {bench.name}")
        logger.warning("Build of %s under %s failed, disabling", bench.name, config.name)
        bench.disabled = True
        return f"{result.diagnostic}({bench.name})\n"

    stat = BenchStat(
        name=bench.name,
        real_ns=real_ns,
        user_ns=result.user_ns,
        sys_ns=result.sys_ns,
    )
    config.build_stats.append(stat)

    record = format_build_record(config, stat)
    if opts.verbose > 0:
        console.echo(record)
    build_log = build_bench_name(config, opts)
    try:
        append_bytes(build_log, record.encode())
    except OSError as exc:
        console.error(f"There was an error opening {build_log} for append, error {exc}")
        logger.critical("Cannot append to build log %s: %s", build_log, exc)
        raise SystemExit(EXIT_BUILD_LOG) from exc

    if count == 0:
        run_other_benchmarks(config, bench, cwd, opts)

    return ""
