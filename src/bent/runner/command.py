"""Running external commands with their output streamed into the results log."""

from __future__ import annotations

import logging
import resource
import signal
import subprocess
import threading
from pathlib import Path

from bent.console import console
from bent.domain.models import Command, CommandResult, Configuration, RunOptions
from bent.env import as_command_line
from bent.logsink import LogSink
from bent.runner.drain import StreamDrainer

logger = logging.getLogger(__name__)


def _children_times() -> tuple[int, int]:
    """Return (user, sys) CPU time of waited-for children, in nanoseconds."""
    usage = resource.getrusage(resource.RUSAGE_CHILDREN)
    return round(usage.ru_utime * 1e6) * 1000, round(usage.ru_stime * 1e6) * 1000


def _describe_exit(rc: int) -> str:
    if rc < 0:
        try:
            name = signal.Signals(-rc).name
        except ValueError:
            name = str(-rc)
        return f"terminated by signal {name}"
    return ""


def run_binary(
    config: Configuration,
    cwd: Path | str,
    cmd: Command,
    opts: RunOptions,
    *,
    print_working_dot: bool = False,
) -> CommandResult:
    """Run *cmd* to completion, copying its output into *config*'s results log.

    Does not return until both output streams are drained and the
    process has been reaped, in that order. There is no timeout: a
    child that never exits blocks the caller.

    Returns a CommandResult whose diagnostic is empty on success. User
    and system time are those of the child (and the descendants it
    waited for).
    """
    line = as_command_line(cwd, cmd)
    if opts.verbose > 0:
        console.command(line)
    elif print_working_dot:
        console.progress()

    rc = 0
    sink = LogSink(config.bench_log)
    try:
        sink.open()
    except OSError as exc:
        return CommandResult(f"Error [log open] running '{line}', {exc}", rc)

    try:
        user_before, sys_before = _children_times()
        try:
            proc = subprocess.Popen(
                cmd.argv,
                cwd=cmd.cwd,
                env=cmd.env or None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            logger.info("Launch failed: %s: %s", line, exc)
            return CommandResult(f"Error [command start] running '{line}', {exc}", rc)

        assert proc.stdout is not None
        assert proc.stderr is not None
        lock = threading.Lock()
        out = StreamDrainer("stdout", proc.stdout, sink, lock).start()
        err = StreamDrainer("stderr", proc.stderr, sink, lock).start()

        err_s = out.wait()
        err_e = err.wait()

        rc = proc.wait()
        proc.stdout.close()
        proc.stderr.close()
        user_after, sys_after = _children_times()
    finally:
        sink.close()

    user_ns = user_after - user_before
    sys_ns = sys_after - sys_before

    if rc != 0:
        detail = _describe_exit(rc)
        if detail:
            diagnostic = f"Error running '{line}', {detail}, rc = {rc}"
        else:
            stderr = err.tail.decode(errors="replace")
            diagnostic = f"Error running '{line}', stderr = {stderr}, rc = {rc}"
        logger.info("Command failed rc=%d: %s", rc, line)
        return CommandResult(diagnostic, rc, user_ns, sys_ns)
    if err_s is not None:
        return CommandResult(
            f"Error [read stdout] running '{line}', {err_s}, rc = {rc}", rc, user_ns, sys_ns
        )
    if err_e is not None:
        return CommandResult(
            f"Error [read stderr] running '{line}', {err_e}, rc = {rc}", rc, user_ns, sys_ns
        )
    return CommandResult("", rc, user_ns, sys_ns)
