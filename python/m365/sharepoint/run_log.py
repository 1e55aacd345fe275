#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
run_log.py

Append-only run log shared by the SharePoint admin scripts.

Every message is echoed to stdout and appended to <directory>/<filename> as

    [MM/DD/YY HH:MM:SS] - <message>

Logging is best-effort: a directory that cannot be created or a file that
cannot be written prints the error and returns, it never raises into the
caller's loop.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

TIMESTAMP_FORMAT = "%m/%d/%y %H:%M:%S"
PACKAGE_LOGGER = "m365.sharepoint"


def format_line(message: str, when: Optional[datetime] = None) -> str:
    when = when or datetime.now()
    return f"[{when.strftime(TIMESTAMP_FORMAT)}] - {message}"


def log_message(message: str, directory: Union[str, Path], filename: str,
                when: Optional[datetime] = None) -> None:
    log_dir = Path(directory)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Unable to create log directory '{log_dir}': {e}")
        return

    print(message)
    try:
        with open(log_dir / filename, "a", encoding="utf-8") as log:
            log.write(format_line(message, when) + "\n")
    except OSError as e:
        print(f"Unable to write to log file '{log_dir / filename}': {e}")


class RunLogHandler(logging.Handler):
    """logging.Handler that writes records through log_message()."""

    def __init__(self, directory: Union[str, Path], filename: str, level: int = logging.INFO):
        super().__init__(level)
        self.directory = Path(directory)
        self.filename = filename
        # level of the package logger before attach_run_log() changed it
        self.previous_level: int = logging.NOTSET

    @property
    def path(self) -> Path:
        return self.directory / self.filename

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except (TypeError, ValueError) as e:
            print(f"Unable to format log record: {e}")
            return
        log_message(message, self.directory, self.filename,
                    when=datetime.fromtimestamp(record.created))


def attach_run_log(directory: Union[str, Path], filename: str) -> RunLogHandler:
    handler = RunLogHandler(directory, filename)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger(PACKAGE_LOGGER)
    handler.previous_level = logger.level
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    return handler


def detach_run_log(handler: RunLogHandler) -> None:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.removeHandler(handler)
    logger.setLevel(handler.previous_level)
    handler.close()
