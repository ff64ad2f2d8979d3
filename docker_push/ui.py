"""User-facing message sink.

The push workflow reports progress and non-fatal problems through a Ui rather
than printing directly, so callers can capture or redirect the output.
"""

from typing import Protocol

import click
import structlog

logger = structlog.get_logger(__name__)


class Ui(Protocol):
    def say(self, message: str) -> None: ...

    def message(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ConsoleUi:
    """Ui that echoes to the terminal.

    Lines are mirrored to the structured log only once logging has been set
    up with configure_logging(); unconfigured structlog would print them to
    stdout a second time.
    """

    def __init__(self, prefix: str = "docker-push"):
        self.prefix = prefix

    def say(self, message: str) -> None:
        click.echo(f"==> {self.prefix}: {message}", err=True)
        self._mirror("ui", message)

    def message(self, message: str) -> None:
        click.echo(f"    {self.prefix}: {message}", err=True)
        self._mirror("ui", message)

    def error(self, message: str) -> None:
        click.secho(f"==> {self.prefix}: {message}", err=True, fg="red")
        self._mirror("ui error", message)

    @staticmethod
    def _mirror(event: str, message: str) -> None:
        if structlog.is_configured():
            logger.debug(event, text=message)
