"""One-time preparation before any benchmark is built."""

import logging
import shutil

from bent.config import goroot_copy_dir
from bent.console import console
from bent.domain.models import Configuration, RunOptions
from bent.logsink import create_files_for_later

logger = logging.getLogger(__name__)


def prepare_directories(opts: RunOptions) -> None:
    """Create the bench and testbin directories."""
    opts.dirs.bench_dir.mkdir(parents=True, exist_ok=True)
    opts.dirs.test_bin_dir.mkdir(parents=True, exist_ok=True)


def copy_root(config: Configuration, opts: RunOptions) -> None:
    """Give *config* a private copy of its toolchain root.

    Timing the compiler on a copy keeps builds under other
    configurations from touching the files being measured. A
    configuration whose root cannot be copied is disabled.
    """
    if config.disabled or not config.root:
        return
    target = goroot_copy_dir(opts.dirs, config.name)
    logger.info("Copying %s to %s", config.root, target)
    if opts.verbose > 0:
        console.info(f"Copying {config.root} to {target}")
    try:
        shutil.copytree(config.root, target, symlinks=True, dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        console.error(f"Error copying {config.root} to {target}, err={exc}")
        logger.error("Disabling configuration %s: %s", config.name, exc)
        config.disabled = True
        return
    config.root_copy = str(target)


def setup_configuration(config: Configuration, opts: RunOptions) -> None:
    """Create log files and the toolchain copy for *config*."""
    if config.root and not config.disabled:
        go = config.go_command()
        if shutil.which(go) is None:
            console.error(f"Configuration {config.name}: no go command at {go}, disabling")
            config.disabled = True
            return
    create_files_for_later(config, opts)
    copy_root(config, opts)
