"""A collection of utility function, shared across modules."""
import datetime
import logging
import os
import subprocess
from argparse import ArgumentTypeError
from logging import Logger
from typing import Any, Dict, Optional

import pandas as pd

from .exceptions import DataError


def get_current() -> str:
    """Get the current date in standard FuSPiL format."""
    today = datetime.date.today()
    return "%04d_%02d_%02d" % (today.year, today.month, today.day)


def get_overridable_current_date(parameters: Dict[str, Any]) -> str:
    """Get an eventual overridden date.

    If the `parameters` dict contains a `use_date` value, return it.
    Otherwise return the result of `get_current`.
    """
    if parameters.get("use_date") is None:
        return get_current()
    else:
        current_date = parameters["use_date"]
        assert isinstance(current_date, str)
        return current_date


def parsed_date(raw_date: str) -> str:
    """Parse a date in 'Y_M_D' format and return a std FuSPiL date."""
    try:
        date = datetime.datetime.strptime(raw_date, "%Y_%m_%d")
    except ValueError:
        raise ArgumentTypeError("expected string in format YYYY_MM_DD")
    return "%04d_%02d_%02d" % (date.year, date.month, date.day)


def run_and_log(command: str, logger: Logger, cwd: Optional[str] = None) -> int:
    """Run a command and log everything.

    Use `subprocess.Popen` to run a command. The standard output and the
    standard error are piped into the logger.

    Args:
        command: the command to run.
        logger: the logger.
        cwd: the working directory of the process. If `None`, the
             current directory is used.

    Returns:
        int: the exit status of the process.

    """
    logger.info("Running command: %s", command)
    with subprocess.Popen(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        shell=True,
        cwd=cwd,
        universal_newlines=True,
        bufsize=1,
    ) as process:
        (out, err) = process.communicate()

        for line in out.split("\n"):
            if line != "":
                logger.info(line)

        for line in err.split("\n"):
            if line != "":
                logger.warning(line)

        return process.wait()


def create_logger(
    logger_name: str, handler: Optional[logging.FileHandler] = None
) -> Logger:
    """Create a named logger and add a handler to this.

    A pool worker can create the same logger more than once, therefore
    a file handler is added only if the logger is not already writing to
    the same file.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    if handler:
        already_handled = any(
            isinstance(current, logging.FileHandler)
            and current.baseFilename == handler.baseFilename
            for current in logger.handlers
        )
        if already_handled:
            handler.close()
        else:
            logger.addHandler(handler)

    return logger


def create_file_logger(logger_name: str, filename: str) -> Logger:
    """Create a named logger writing into `filename`."""
    os.makedirs(os.path.dirname(filename), exist_ok=True)
    handler = logging.FileHandler(filename)
    handler.setFormatter(logging.Formatter("%(asctime)-15s %(message)s"))
    return create_logger(logger_name, handler)


def count_records(filename: str) -> int:
    """Count the records of a tab separated result file.

    The first line is always considered the header. Missing files,
    zero-byte files and files with only the header have no records.

    Raises:
        DataError: the file is not a valid table.
    """
    if not os.path.isfile(filename) or os.path.getsize(filename) == 0:
        return 0

    try:
        table = pd.read_csv(filename, sep="\t", dtype=str)
    except pd.errors.EmptyDataError:
        return 0
    except pd.errors.ParserError as error:
        raise DataError("cannot read the records of %s: %s" % (filename, error))

    return len(table.index)
