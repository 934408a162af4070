"""bent.console._protocol -- ConsoleProtocol definition.

Pure standard-library typing.Protocol for bent's terminal output.
No external dependencies allowed in this file.
"""

from __future__ import annotations

from typing import Protocol


class ConsoleProtocol(Protocol):
    """bent terminal output protocol.

    **General messages**::

        console.info("Building 12 benchmarks")
        console.error("Error running go clean -cache, ...")

    **Progress and raw output** -- used while commands run::

        console.progress()          # one "." per command
        console.command("cd x; go test -c ...")
        console.echo("BenchmarkFoo-8  100  12 ns/op\\n")

    **Structured panels**::

        console.table(["Benchmark", "real"], [["fib", "1.2s"]], title="base")
        console.kv({"Runstamp": "20260101T000000"})
    """

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def success(self, message: str) -> None:
        """Success / positive-outcome message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message; always shown regardless of verbosity."""
        ...

    # -- Progress and raw output --------------------------------------------

    def progress(self) -> None:
        """Emit a single ``.`` "still working" marker (no newline)."""
        ...

    def command(self, line: str) -> None:
        """Show the command line about to run (verbose mode)."""
        ...

    def echo(self, text: str) -> None:
        """Copy raw process output to the terminal, no markup, no newline."""
        ...

    # -- Structured panels --------------------------------------------------

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        """Display a table with *headers* and *rows*."""
        ...

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Display key-value pairs."""
        ...
