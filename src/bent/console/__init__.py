"""bent.console -- terminal output for bent.

Usage (any module)::

    from bent.console import console

    console.progress()
    console.error("Error running go clean -cache, ...")

Configuration (call once in ``cli.main()``)::

    from bent.console import configure

    configure(backend="auto")  # "rich" | "plain" | "auto"
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from bent.console._plain import PlainBackend

if TYPE_CHECKING:
    from bent.console._protocol import ConsoleProtocol

# ---------------------------------------------------------------------------
# Global singleton -- defaults to PlainBackend
# ---------------------------------------------------------------------------

_backend: ConsoleProtocol = PlainBackend()


def configure(*, backend: str = "auto") -> None:
    """Select the console backend.

    Args:
        backend: ``"rich"`` -- always use Rich.
                 ``"plain"`` -- always use plain text.
                 ``"auto"`` (default) -- Rich when stdout is a TTY,
                 plain otherwise.
    """
    global _backend  # noqa: PLW0603

    if backend == "plain":
        _backend = PlainBackend()
        return

    if backend == "auto":
        if not sys.stdout.isatty():
            _backend = PlainBackend()
            return
        backend = "rich"

    if backend == "rich":
        from bent.console._rich import RichBackend

        _backend = RichBackend()
        return

    msg = f"unknown console backend {backend!r}"
    raise ValueError(msg)


def get_console() -> ConsoleProtocol:
    """Return the current backend instance."""
    return _backend


# ---------------------------------------------------------------------------
# Proxy object -- ``from bent.console import console``
# ---------------------------------------------------------------------------


class _ConsoleProxy:
    """Transparent proxy that delegates to the current ``_backend``.

    Callers import ``console`` once at module level and pick up any
    later ``configure()`` call.
    """

    def __getattr__(self, name: str) -> object:
        return getattr(_backend, name)


console: ConsoleProtocol = _ConsoleProxy()  # type: ignore[assignment]
