# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/log_setup.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Configures append-only file and console logging with numeric operator severities

"""
Logging setup for deployer runs.

Log lines are single-line entries carrying timestamp, severity (1=info,
2=warning, 3=error), execution context, process id and message. The log
file is appended to and never truncated.
"""

import logging
import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

LOG_FILE_NAME = "c2r-deployer.log"

SEVERITY_INFO = 1
SEVERITY_WARNING = 2
SEVERITY_ERROR = 3


def severity_for(levelno: int) -> int:
    """Map a logging level to the operator severity scale."""
    if levelno >= logging.ERROR:
        return SEVERITY_ERROR
    if levelno >= logging.WARNING:
        return SEVERITY_WARNING
    return SEVERITY_INFO


class SeverityFormatter(logging.Formatter):
    """Formats records as one line: timestamp | severity | context | pid | message."""

    def formatTime(self, record, datefmt=None):
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.isoformat(timespec='milliseconds')

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message} {self.formatException(record.exc_info)}"
        # One entry per line, no matter what the message carries
        message = " ".join(message.split())

        return (
            f"{self.formatTime(record)} | {severity_for(record.levelno)} | "
            f"{record.name} | pid={record.process} | {message}"
        )


def default_log_path() -> Path:
    """
    Resolve the well-known log location.

    Windows: %ProgramData%/C2RDeploy/Logs
    Elsewhere: <tempdir>/C2RDeploy/Logs
    """
    program_data = os.environ.get("ProgramData")
    base = Path(program_data) if program_data else Path(tempfile.gettempdir())
    return base / "C2RDeploy" / "Logs" / LOG_FILE_NAME


def setup_logging(log_path: Optional[Union[str, Path]] = None,
                  level: Union[int, str] = logging.INFO,
                  console: bool = True) -> logging.Logger:
    """
    Configure logging to file (append) and console.

    Args:
        log_path: Log file path; default_log_path() when None
        level: Logging level name or number
        console: Also log to stdout

    Returns:
        The c2r_installer package logger
    """
    path = Path(log_path) if log_path else default_log_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    formatter = SeverityFormatter()
    handlers = [logging.FileHandler(path, mode='a', encoding='utf-8')]
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    for handler in handlers:
        handler.setFormatter(formatter)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.basicConfig(level=level, handlers=handlers, force=True)
    return logging.getLogger("c2r_installer")
