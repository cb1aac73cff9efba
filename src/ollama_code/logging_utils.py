"""
Logging setup for the CLI.
Console output goes through rich; a plain-text log file sits next to the event traces.
"""
from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir
from rich.console import Console
from rich.logging import RichHandler

from .config.models import APP_NAME


def log_file_path() -> Path:
    return Path(user_log_dir(APP_NAME)) / "ollama-code.log"


def setup_logging(verbose: bool = False, console: Console | None = None, log_file: Path | None = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    handlers: list[logging.Handler] = [
        RichHandler(console=console or Console(stderr=True), show_path=False, rich_tracebacks=True, markup=False),
    ]
    log_file = log_file or log_file_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s", handlers=handlers, force=True)
    handlers[0].setLevel(level)
    logging.getLogger(__name__).debug("Logging initialized at %s", log_file)
