"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the command-line
driver.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    EXECUTION_ERROR = 1  # Illegal instruction, pc too large, step limit
    INVALID_ARGS = 2     # Invalid or missing arguments
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception raised while running and exit.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from futamura_vm.errors import VMError

    if isinstance(error, VMError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.EXECUTION_ERROR)

    elif isinstance(error, (click.BadParameter, ValueError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
