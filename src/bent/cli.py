"""CLI entry point for bent.

Usage:
  bent run [-s SUITE] [-c CONFIGS] [-b BENCHMARKS] [-n COUNT] [-a] [-v]
  bent list [-s SUITE]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from bent.config import LOG_FILE, SUITE_FILE, directories, new_runstamp
from bent.console import configure, console
from bent.domain.models import Configuration, RunOptions
from bent.env import default_env
from bent.suite import Suite, SuiteError, load_suite

logger = logging.getLogger("bent")


def _setup_logging(bench_dir: Path, verbose: int) -> None:
    """Configure file logging to <bench_dir>/bent.log."""
    bench_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(bench_dir / LOG_FILE, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose > 0 else logging.INFO)
    root.addHandler(handler)


def _split(value: str) -> list[str]:
    return [v for v in value.split(",") if v]


def _load(args: argparse.Namespace) -> Suite:
    suite = load_suite(Path(args.suite))
    return suite.select(_split(args.configs), _split(args.benchmarks))


def _ms(ns: int) -> str:
    return f"{ns / 1e6:.1f}ms"


def _report_build_stats(configs: list[Configuration]) -> None:
    for config in configs:
        if not config.build_stats:
            continue
        rows = [
            [s.name, _ms(s.real_ns), _ms(s.user_ns), _ms(s.sys_ns)]
            for s in config.build_stats
        ]
        console.table(["Benchmark", "real", "user", "sys"], rows, title=config.name)


# ---------------------------------------------------------------------------
# CLI commands
# ---------------------------------------------------------------------------


def cmd_run(args: argparse.Namespace) -> None:
    """Build and run the selected benchmarks."""
    from bent.driver import run_suite

    suite = _load(args)
    dirs = directories(Path.cwd())
    opts = RunOptions(
        dirs=dirs,
        runstamp=new_runstamp(),
        verbose=args.verbose,
        rebuild_all=args.rebuild_all,
        base_env=default_env(),
    )
    _setup_logging(dirs.bench_dir, args.verbose)
    logger.info(
        "Run %s: %d configurations, %d benchmarks, count=%d",
        opts.runstamp,
        len(suite.configurations),
        len(suite.benchmarks),
        args.count,
    )
    if args.verbose > 0:
        console.kv(
            {
                "Runstamp": opts.runstamp,
                "Logs": str(dirs.bench_dir),
                "Binaries": str(dirs.test_bin_dir),
            }
        )

    failures = run_suite(suite.configurations, suite.benchmarks, opts, args.count)
    _report_build_stats(suite.configurations)

    if failures:
        console.error(f"{len(failures)} failure(s):")
        for f in failures:
            console.error(f.rstrip("\n"))
        sys.exit(1)
    console.success(f"Results in {dirs.bench_dir}/{opts.runstamp}.*")


def cmd_list(args: argparse.Namespace) -> None:
    """Show the suite's configurations and benchmarks."""
    suite = _load(args)
    console.table(
        ["Configuration", "Root", "GcFlags", "Status"],
        [
            [c.name, c.root or "-", c.gc_flags or "-", "disabled" if c.disabled else "ok"]
            for c in suite.configurations
        ],
        title="Configurations",
    )
    console.table(
        ["Benchmark", "Repo", "Benchmarks", "Status"],
        [
            [b.name, b.repo, b.benchmarks, "disabled" if b.disabled else "ok"]
            for b in suite.benchmarks
        ],
        title="Benchmarks",
    )


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def _add_suite_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("-s", "--suite", default=SUITE_FILE, help=f"Suite file (default: {SUITE_FILE})")
    p.add_argument("-c", "--configs", default="", help="Comma-separated configurations to use")
    p.add_argument("-b", "--benchmarks", default="", help="Comma-separated benchmarks to use")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="bent",
        description="bent -- build and run Go benchmarks under several configurations",
    )
    parser.add_argument(
        "--console",
        choices=["auto", "rich", "plain"],
        default="auto",
        help="Terminal output style (default: auto)",
    )
    sub = parser.add_subparsers(dest="command")

    # bent run
    run_p = sub.add_parser("run", help="Build and run benchmarks")
    _add_suite_args(run_p)
    run_p.add_argument("-n", "--count", type=int, default=1, help="Repetitions (default: 1)")
    run_p.add_argument(
        "-a",
        "--rebuild-all",
        action="store_true",
        help="Pass -a to go test -c instead of clearing the build cache",
    )
    run_p.add_argument(
        "-v", "--verbose", action="count", default=0, help="Show commands and their output"
    )

    # bent list
    list_p = sub.add_parser("list", help="Show configurations and benchmarks")
    _add_suite_args(list_p)

    args = parser.parse_args(argv)

    configure(backend=args.console)

    try:
        if args.command == "run":
            cmd_run(args)
        elif args.command == "list":
            cmd_list(args)
        else:
            parser.print_help()
            sys.exit(1)
    except SuiteError as exc:
        console.error(str(exc))
        sys.exit(2)


if __name__ == "__main__":
    main()
