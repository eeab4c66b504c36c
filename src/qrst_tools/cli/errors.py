"""
qrst CLI Error Handling
=======================

Maps codec and usage errors raised by the qrst commands to exit codes.

Every QRSTError is reported on one line prefixed with the command name, e.g.
"Resize error: shrinking images isn't supported". Missing or unreadable
files are usage errors. Anything else is a bug and exits with
INTERNAL_ERROR.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Exit codes of the qrst commands."""
    SUCCESS = 0
    FORMAT_ERROR = 1     # QRSTError: bad header or record, checksum mismatch, shrink
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception raised by a qrst command and exit.

    QRST errors keep their own message, which names the offending field
    or track (e.g. "bad trailer in header: 0x02 for version 1"). The
    traceback is only printed for internal errors in verbose mode.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Dump")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from qrst_tools.errors import QRSTError

    if isinstance(error, QRSTError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.FORMAT_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
