"""Corsy CLI - Command Line Interface."""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from corsy import __version__
from corsy.brain.orchestrator import Orchestrator
from corsy.brain.targets import TargetSourceError
from corsy.utils.config import (
    DEFAULT_CONFIG_PATH,
    Config,
    ConfigError,
    ScanConfig,
    validate_origin,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="corsy",
    help="Corsy - detect CORS misconfigurations by sending forged Origin headers",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

CONFIG_TEMPLATE = '''# Corsy Configuration
targets:
  url: ""            # single URL to scan
  input_file: ""     # newline-delimited list of URLs

output:
  file: ""           # JSON results file; empty prints to the console
  log_file: ""       # request/response traffic log

probe:
  timeout: 10        # per-request timeout in seconds
  origin: "https://evil.com"
  concurrency: 1     # requests in flight at once
'''


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


def _load_config(path: str) -> Config:
    """Load the config file, treating a missing default file as empty."""
    cfg = Config(path)
    try:
        cfg.load()
    except FileNotFoundError:
        if path != DEFAULT_CONFIG_PATH:
            err_console.print(f"[bold red]Configuration file not found:[/bold red] {escape(path)}")
            raise typer.Exit(code=1)
        logger.debug("No %s found, using defaults", path)
    except ConfigError as e:
        err_console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e
    return cfg


def _validate_origin_option(value: str) -> str:
    if value is None:
        return value
    try:
        return validate_origin(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold magenta]Corsy[/bold magenta] v{__version__}")


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Initialize a new corsy.yaml configuration file."""
    path = Path(DEFAULT_CONFIG_PATH)
    if path.exists() and not force:
        console.print(f"[yellow]{path} already exists. Use --force to overwrite.[/yellow]")
        return

    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {path}")
    console.print("Edit the file with your targets and probe settings.")


@app.command()
def scan(
    url: str = typer.Option(
        None,
        "--url",
        "-u",
        help="Single URL to scan for CORS issues",
    ),
    input_file: str = typer.Option(
        None,
        "--input",
        "-i",
        help="Input file containing URLs to scan, one per line",
    ),
    output: str = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file to save JSON results (prints to console if omitted)",
    ),
    timeout: int = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Timeout for HTTP requests in seconds [default: 10]",
        min=1,
    ),
    origin: str = typer.Option(
        None,
        "--origin",
        help="Origin header sent with every request [default: https://evil.com]",
        callback=_validate_origin_option,
    ),
    concurrency: int = typer.Option(
        None,
        "--concurrency",
        help="Maximum number of requests in flight [default: 1]",
        min=1,
    ),
    config: str = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    log_file: str = typer.Option(
        None,
        "--log-file",
        help="Write request/response traffic to this file",
    ),
    fail_on_vulnerable: bool = typer.Option(
        False,
        "--fail-on-vulnerable",
        help="Exit with code 1 if any URL is vulnerable (useful for CI)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """Scan URLs for CORS misconfigurations."""
    _configure_logging(verbose)

    scan_config = ScanConfig.from_sources(
        _load_config(config),
        url=url,
        input_file=input_file,
        output_file=output,
        timeout=timeout,
        origin=origin,
        concurrency=concurrency,
        log_file=log_file,
    )

    if not scan_config.has_targets:
        err_console.print(
            "[bold red]Error:[/bold red] No URLs provided. "
            "Use -u for a single URL or -i for an input file."
        )
        err_console.print("Usage: corsy scan [-u URL] [-i FILE] [-o OUTPUT] [-t SECONDS]")
        raise typer.Exit(code=1)

    orchestrator = Orchestrator(scan_config, console=console, err_console=err_console)
    try:
        results = asyncio.run(orchestrator.run())
    except TargetSourceError as e:
        err_console.print(f"[bold red]{escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e

    vulnerable = sum(1 for r in results if r.vulnerable)
    console.print(
        f"\n[bold]Scanned {len(results)} URL(s):[/bold] "
        f"[red]{vulnerable} vulnerable[/red], [green]{len(results) - vulnerable} secure[/green]"
    )

    if fail_on_vulnerable and vulnerable:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
