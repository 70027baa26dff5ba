"""
Logging Configuration Module
============================

One place that wires the root logger for AMBA Cleaner runs.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides where those records go. Discovery counts and per-item deletion lines
go to stderr through Rich so that stdout stays free for tables and prompts.
A plain-text copy can be written to a file for audit trails of destructive
runs.

The Azure SDK logs every HTTP request at INFO, which would drown out the
cleanup progress, so its loggers are held at ``sdk_level``.

Example
-------
>>> from amba_cleaner.core.logging import setup_logging
>>> setup_logging(level="DEBUG", log_file="amba-cleanup.log")
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

AZURE_SDK_LOGGERS = (
    "azure",
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "urllib3",
)


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
    sdk_level: Union[str, int] = "WARNING",
) -> None:
    """
    Route log records to the terminal and, optionally, a file.

    Parameters
    ----------
    level : str or int, default="INFO"
        Level for AMBA Cleaner's own loggers.
    log_file : str, optional
        Also write records to this file, with timestamps and logger names.
    console : Console, optional
        Rich console for the terminal handler. Defaults to one on stderr.
    sdk_level : str or int, default="WARNING"
        Level for the Azure SDK and HTTP transport loggers.

    Notes
    -----
    Handlers already on the root logger are replaced, so calling this
    again never duplicates output.
    """
    level = _to_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Messages carry resource IDs and KQL, never Rich markup
    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )
    console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name in AZURE_SDK_LOGGERS:
        logging.getLogger(name).setLevel(_to_level(sdk_level))

    root_logger.debug(
        f"Logging configured: level={logging.getLevelName(level)}, "
        f"file={log_file or 'None'}"
    )
