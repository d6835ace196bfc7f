"""
fvm - Futamura VM Command-Line Driver
=====================================

Runs the compiled-in fibonacci program with INPUT in register r0 and
reports r0 before and after.

Usage Examples
--------------
Run with the generic interpreter:
    $ fvm 10

Pick a dispatch variant:
    $ fvm 10 --dispatch transition

Trace every executed instruction:
    $ fvm 3 --trace

Show the program listing first:
    $ fvm 3 --listing

The --dispatch, --pc-bound and --max-steps options can also be set with
the FVM_DISPATCH, FVM_PC_BOUND and FVM_MAX_STEPS environment variables.
"""

import logging
import sys
from typing import Optional

import click

from futamura_vm import __version__
from futamura_vm.cli.errors import handle_cli_exception
from futamura_vm.machine import (
    DEFAULT_PC_BOUND,
    DispatchMode,
    Interpreter,
    InterpreterConfig,
    disassemble,
)
from futamura_vm.machine.state import MASK32

logger = logging.getLogger(__name__)


# =============================================================================
# Parameter Types and Utilities
# =============================================================================

class UInt32(click.ParamType):
    """A base-10 unsigned integer that fits in a 32-bit register."""

    name = "uint32"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            number = value
        else:
            text = str(value).strip()
            if not (text.isascii() and text.isdecimal()):
                self.fail(f"'{value}' is not a base-10 unsigned integer", param, ctx)
            number = int(text)
        if not 0 <= number <= MASK32:
            self.fail(f"{number} is out of range (0 to {MASK32})", param, ctx)
        return number


def setup_logging(trace: bool) -> None:
    """Configure logging based on the trace flag."""
    if trace:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s: %(message)s",
            stream=sys.stderr,
        )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("input_value", metavar="INPUT", type=UInt32())
@click.option(
    "-d", "--dispatch",
    type=click.Choice([m.value for m in DispatchMode], case_sensitive=False),
    default=DispatchMode.GENERIC.value,
    envvar="FVM_DISPATCH",
    show_default=True,
    help="Dispatch variant: runtime decode, per-pc bodies, or linked per-pc bodies",
)
@click.option(
    "--pc-bound",
    type=click.IntRange(min=1),
    default=DEFAULT_PC_BOUND,
    envvar="FVM_PC_BOUND",
    show_default=True,
    help="Number of pc values the specialized variants build bodies for",
)
@click.option(
    "--max-steps",
    type=click.IntRange(min=0),
    default=None,
    envvar="FVM_MAX_STEPS",
    help="Abort after this many instructions (default: unlimited)",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Log every executed instruction to stderr",
)
@click.option(
    "--listing",
    is_flag=True,
    help="Print the program listing before running",
)
@click.version_option(version=__version__, prog_name="fvm")
def main(
    input_value: int,
    dispatch: str,
    pc_bound: int,
    max_steps: Optional[int],
    trace: bool,
    listing: bool,
) -> None:
    """
    Run the compiled-in fibonacci program with INPUT in register r0.

    INPUT is a base-10 unsigned 32-bit integer.

    Examples:

        # Generic interpreter
        fvm 10

        # Interpreter specialized to pc transitions
        fvm 10 --dispatch transition
    """
    setup_logging(trace)

    try:
        config = InterpreterConfig(
            dispatch=DispatchMode.parse(dispatch),
            pc_bound=pc_bound,
            max_steps=max_steps,
        )
        interp = Interpreter(config)

        if listing:
            for instr in disassemble(interp.code):
                click.echo(str(instr))
            click.echo()

        click.echo(f"register r0 input is: {input_value}")
        result = interp.run(input_value)
    except Exception as e:
        handle_cli_exception(e, verbose=trace)

    click.echo("halt")
    click.echo(f"register r0 output is: {result.output_value}")
    logger.debug(f"{result.steps} instructions executed")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
