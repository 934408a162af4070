"""bent.console._rich -- Rich-based terminal backend.

Coloured messages and tables via Rich. Raw process output goes through
``Console.out`` so benchmark text is never interpreted as markup.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "blue",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "command": "dim cyan",
        "progress": "dim",
    }
)


class RichBackend:
    """ConsoleProtocol implementation backed by Rich."""

    def __init__(self) -> None:
        self._con = Console(theme=_THEME, highlight=False)

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        self._con.print(message, style="info", markup=False)

    def success(self, message: str) -> None:
        self._con.print(f"✓ {message}", style="success", markup=False)

    def warning(self, message: str) -> None:
        self._con.print(f"⚠ {message}", style="warning", markup=False)

    def error(self, message: str) -> None:
        self._con.print(message, style="error", markup=False)

    # -- Progress and raw output --------------------------------------------

    def progress(self) -> None:
        self._con.print(".", style="progress", end="")

    def command(self, line: str) -> None:
        self._con.print(line, style="command", markup=False)

    def echo(self, text: str) -> None:
        self._con.out(text, end="", highlight=False)

    # -- Structured panels --------------------------------------------------

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        t = Table(title=title or None, box=box.SIMPLE, show_edge=False, pad_edge=True)
        for i, h in enumerate(headers):
            t.add_column(h, justify="left" if i == 0 else "right")
        for r in rows:
            t.add_row(*r)
        self._con.print(t)

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        t = Table(
            title=title or None,
            box=box.SIMPLE,
            show_header=False,
            show_edge=False,
            pad_edge=True,
        )
        t.add_column("Key", style="bold", justify="right")
        t.add_column("Value")
        for k, v in data.items():
            t.add_row(k, v)
        self._con.print(t)
