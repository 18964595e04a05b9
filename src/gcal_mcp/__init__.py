"""Google Calendar tools over an event-stream transport with deferred OAuth."""

from __future__ import annotations

from .core import APP_VERSION as __version__

__all__ = ["__version__", "main"]


def main() -> None:
    from .cli import main as cli_main

    raise SystemExit(cli_main())
