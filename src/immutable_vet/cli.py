"""Command line entry point.

    immutable-vet ./...
    immutable-vet --format github ./shapes ./lists
"""

from enum import IntEnum
from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .analysis import vet
from .config import load_config
from .exceptions import ConfigurationError, ImmutableVetError, PackageResolutionError
from .formatters import get_formatter
from .logging_config import get_logger, setup_logging

console = Console(stderr=True)
logger = get_logger(__name__)

app = typer.Typer(
    name="immutable-vet",
    help="immutable-vet - enforce the immutableGen immutability convention",
    add_completion=False,
    rich_markup_mode="rich",
)


class ExitCode(IntEnum):
    CLEAN = 0
    VIOLATIONS = 1
    CONFIG_ERROR = 81
    BAD_SPEC = 82
    TOOL_FAULT = 100
    INTERRUPTED = 130


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]immutable-vet[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(ExitCode.CLEAN)


@app.command()
def main(
    specs: List[str] = typer.Argument(
        ...,
        help="Packages to vet: directories, facts documents or dir/... patterns",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "-f",
        "--format",
        help="Output format: text | json | github",
        click_type=click.Choice(["text", "json", "github"], case_sensitive=False),
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log each package as it is vetted",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    """
    Vet Go packages for violations of the immutableGen convention.

    Every violation is printed as [bold]path:line:column: message[/bold];
    the exit status is 1 when there is at least one.

    [bold cyan]Examples:[/bold cyan]

      immutable-vet ./...

      immutable-vet ./shapes --format json

      immutable-vet ./shapes/.immutable-vet.json --verbose
    """
    try:
        overrides: dict[str, object] = {"verbose": verbose, "quiet": quiet}
        if output_format is not None:
            overrides["output_format"] = output_format.lower()
        settings = load_config(config_file=config, **overrides)
        setup_logging(settings.verbosity, log_file=str(log_file) if log_file else None)

        wd = Path.cwd()
        violations = vet(wd, specs, config=settings)

        get_formatter(settings.output_format).render(violations)

        if violations:
            logger.info(f"{len(violations)} violation(s)")
            raise typer.Exit(ExitCode.VIOLATIONS)

    except typer.Exit:
        raise

    except ConfigurationError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(ExitCode.CONFIG_ERROR)

    except PackageResolutionError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(ExitCode.BAD_SPEC)

    except ImmutableVetError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(ExitCode.TOOL_FAULT)

    except KeyboardInterrupt:
        logger.info("Vet interrupted by user")
        console.print("\n[yellow]Vet interrupted[/yellow]")
        raise typer.Exit(ExitCode.INTERRUPTED)

    except Exception as e:
        logger.exception("Unexpected error during vet")
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(ExitCode.TOOL_FAULT)
