"""
cfront Exit Codes
=================

Maps exceptions raised while running the front end onto process exit
codes and stderr messages.

    0   success
    1   the input has lex or parse errors
    2   bad arguments, unreadable or non-UTF-8 input
    3   a bug in the front end itself
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from c_transpiler.errors import TranspilerError
from c_transpiler.frontend.errors import FrontendError


class ExitCode(IntEnum):
    """Process exit codes for cfront."""
    SUCCESS = 0
    SOURCE_ERROR = 1     # Diagnostics in the C input
    USAGE_ERROR = 2      # Arguments or input file unusable
    INTERNAL_ERROR = 3


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report error on stderr and exit with the matching ExitCode.

    Front end diagnostics are printed as they are, since they already
    start with "file:line:col: error:". The traceback of an unexpected
    exception is shown only with verbose.

    Args:
        error: The exception caught by the command
        verbose: Print the traceback for internal errors
        error_type: Stage name used to prefix other transpiler errors
    """
    if isinstance(error, FrontendError):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.SOURCE_ERROR)

    if isinstance(error, TranspilerError):
        stage = f"{error_type} error" if error_type else "Error"
        click.echo(f"{stage}: {error}", err=True)
        sys.exit(ExitCode.SOURCE_ERROR)

    if isinstance(error, UnicodeDecodeError):
        click.echo(f"Error: input is not valid UTF-8: {error}", err=True)
        sys.exit(ExitCode.USAGE_ERROR)

    if isinstance(error, (click.BadParameter, OSError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.USAGE_ERROR)

    click.echo(f"Internal error: {type(error).__name__}: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
