"""
User prompts for files that cannot be downloaded automatically.

The converter only talks to the :class:`UserNotifier` protocol; the CLI
picks an implementation.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Protocol

import click

logger = logging.getLogger(__name__)


class UserNotifier(Protocol):
    def prompt_manual_download(self, path: str, url: str) -> None: ...


class LoggingNotifier:
    """Log deferred files and remember them as ``(path, url)`` pairs."""

    def __init__(self) -> None:
        self.deferred: list[tuple[str, str]] = []

    def prompt_manual_download(self, path: str, url: str) -> None:
        self.deferred.append((path, url))
        logger.warning(
            "A file (%s) needs to be downloaded manually from an external source: %s",
            path,
            url,
        )


class BrowserNotifier(LoggingNotifier):
    """Open the URL in a browser tab and tell the user where the file goes."""

    def prompt_manual_download(self, path: str, url: str) -> None:
        super().prompt_manual_download(path, url)
        logger.info("Opening external download URL: %s", url)
        webbrowser.open_new_tab(url)
        click.echo(
            f"A file ({path}) needs to be downloaded manually from an external "
            f"source: {url}. Please place it at '{path}' inside the final zip.",
            err=True,
        )
