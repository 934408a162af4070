"""Sequential build-and-run loop over every configuration and benchmark."""

import logging

from bent.build.compile import compile_one
from bent.build.run import run_one
from bent.console import console
from bent.domain.models import Benchmark, Configuration, RunOptions
from bent.setup import prepare_directories, setup_configuration

logger = logging.getLogger(__name__)


def run_suite(
    configs: list[Configuration],
    benches: list[Benchmark],
    opts: RunOptions,
    count: int = 1,
) -> list[str]:
    """Build and run every benchmark under every configuration, *count* times.

    Strictly one external command at a time. Returns the failure text
    of every build or run that failed, in the order they happened.
    """
    prepare_directories(opts)
    for config in configs:
        setup_configuration(config, opts)

    cwd = opts.dirs.wd
    failures: list[str] = []
    for i in range(count):
        for config in configs:
            if config.disabled:
                continue
            logger.info("Repetition %d, configuration %s", i, config.name)
            for bench in benches:
                s = compile_one(config, bench, cwd, i, opts)
                if s:
                    failures.append(s)
                    continue
                s = run_one(config, bench, cwd, opts)
                if s:
                    console.error(s)
                    failures.append(s)
    console.echo("\n")
    return failures
