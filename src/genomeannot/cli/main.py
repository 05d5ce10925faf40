"""Click application entrypoint for genomeannot."""

from __future__ import annotations

import signal
import sys
from types import FrameType
from typing import Optional

import click

from genomeannot import __version__
from genomeannot.cli.exit_codes import (
    EXIT_SUCCESS,
    EXIT_ERROR,
    EXIT_SIGINT,
    EXIT_SIGTERM,
)

from .commands.clean import clean
from .commands.config import init_config
from .commands.image import build_image_command
from .commands.run import run
from .commands.steps import steps
from .commands.validate import validate


def _handle_signal(signum: int, frame: Optional[FrameType]) -> None:
    """Turn SIGINT/SIGTERM into KeyboardInterrupt so running tools are stopped."""
    sig_name = "SIGINT" if signum == signal.SIGINT else "SIGTERM"
    click.echo(f"\n{sig_name} received, stopping the current stage...", err=True)
    raise KeyboardInterrupt(sig_name)


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if value and not ctx.resilient_parsing:
        click.echo(f"genomeannot {__version__}")
        ctx.exit()


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "-V",
    "--version",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_print_version,
    help="Show the version and exit.",
)
def cli() -> None:
    """genomeannot: resumable genome annotation with BUSCO, RepeatModeler/RepeatMasker, STAR and BRAKER3.

    Typical use: genomeannot init-config, edit config.yaml, then
    genomeannot run -c config.yaml
    """


cli.add_command(run)
cli.add_command(steps)
cli.add_command(clean)
cli.add_command(build_image_command)
cli.add_command(init_config)
cli.add_command(validate)


def main(argv: list[str] | None = None) -> int:
    """Main entry point with signal handling."""
    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        cli.main(args=argv, prog_name="genomeannot", standalone_mode=False)
        return EXIT_SUCCESS
    except KeyboardInterrupt as exc:
        return EXIT_SIGTERM if str(exc) == "SIGTERM" else EXIT_SIGINT
    except click.exceptions.Abort as exc:
        # click wraps KeyboardInterrupt in Abort
        return EXIT_SIGTERM if str(exc.__cause__) == "SIGTERM" else EXIT_SIGINT
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
