"""
fixed-hdr CLI.

Commands:
- layout: Derived constants and memory footprint for a parameter triple
- summarize: Record a file of integer values and report percentiles
- config: init|validate|dump configuration files
"""

import json
import logging
import time
from pathlib import Path
from typing import List, Optional
from enum import Enum

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..config import FixedHdrConfig, load_config, generate_default_config
from ..core.errors import ConfigurationError
from ..core.histogram import HdrHistogram
from ..core.layout import resolve_layout
from ..core.summary import HistogramSummary

logger = logging.getLogger(__name__)


app = typer.Typer(
    name="fixed-hdr",
    help="Fixed-layout HDR histogram tools",
    add_completion=False,
)
console = Console()


class OutputFormat(str, Enum):
    json = "json"
    table = "table"


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _layout_table(layout_dict: dict) -> Table:
    table = Table(title="Layout")
    table.add_column("Constant")
    table.add_column("Value", justify="right")
    for key, value in layout_dict.items():
        table.add_row(key, f"{value:,}")
    return table


def _summary_table(summary: HistogramSummary, rejected: int, malformed: int) -> Table:
    unit = f" {summary.unit}" if summary.unit else ""
    table = Table(title="Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Count", f"{summary.total_count:,}")
    table.add_row("Rejected", f"{rejected:,}")
    table.add_row("Malformed", f"{malformed:,}")
    table.add_row("Min", f"{summary.min}{unit}")
    for key, value in summary.percentiles.items():
        table.add_row(key.upper(), f"{value}{unit}")
    table.add_row("Max", f"{summary.max}{unit}")
    table.add_row("Mean", f"{summary.mean:.2f}{unit}")
    table.add_row("Stddev", f"{summary.stddev:.2f}{unit}")
    return table


def _read_values(path: Path):
    """Yield (line_no, text) for non-blank, non-comment lines."""
    with open(path) as f:
        for line_no, line in enumerate(f, start=1):
            text = line.split('#', 1)[0].strip()
            if text:
                yield line_no, text


# === LAYOUT COMMAND ===

@app.command()
def layout(
    lowest: int = typer.Argument(..., help="Lowest discernible value"),
    highest: int = typer.Argument(..., help="Highest trackable value"),
    significant_figures: int = typer.Argument(..., help="Significant figures (1-5)"),
    as_json: bool = typer.Option(False, "--json", help="Print as JSON"),
):
    """Show the derived layout for a parameter triple."""
    try:
        resolved = resolve_layout(lowest, highest, significant_figures)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(resolved.to_dict(), indent=2))
    else:
        console.print(_layout_table(resolved.to_dict()))


# === SUMMARIZE COMMAND ===

@app.command()
def summarize(
    values_file: Path = typer.Argument(..., help="File with one integer per line", exists=True),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
    percentiles: Optional[List[float]] = typer.Option(None, "-p", "--percentile", help="Percentile to report (repeatable)"),
    format: OutputFormat = typer.Option(OutputFormat.table, "-f", "--format"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file"),
    quiet: bool = typer.Option(False, "-q", "--quiet"),
):
    """Record every value in a file and report percentiles."""
    try:
        cfg = load_config(config_path)
    except (FileNotFoundError, ConfigurationError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)
    errors = cfg.validate()
    if errors:
        console.print("[red]Invalid configuration:[/]")
        for e in errors:
            console.print(f"  - {escape(e)}")
        raise typer.Exit(1)

    hist = HdrHistogram.from_config(cfg)
    rejected = 0
    malformed = 0

    start = time.time()
    for line_no, text in _read_values(values_file):
        try:
            value = int(text)
        except ValueError:
            logger.warning("Line %d: not an integer: %r", line_no, text)
            malformed += 1
            continue
        if not hist.record(value):
            rejected += 1
    duration = time.time() - start

    logger.info("Recorded %d values in %.3fs (%d rejected, %d malformed)",
                hist.total_count, duration, rejected, malformed)

    summary = HistogramSummary.from_histogram(
        hist,
        percentiles or cfg.report.percentiles,
        unit=cfg.report.unit,
    )

    if format == OutputFormat.json:
        payload = summary.to_dict()
        payload['rejected'] = rejected
        payload['malformed'] = malformed
        output_text = json.dumps(payload, indent=2)
        if output:
            output.write_text(output_text)
            if not quiet:
                console.print(f"[green]Written to:[/] {output}")
        else:
            typer.echo(output_text)
    else:
        console.print(_summary_table(summary, rejected, malformed))


# === CONFIG COMMAND ===

@app.command("config")
def config_cmd(
    action: str = typer.Argument(..., help="Action: init|validate|dump"),
    path: Optional[Path] = typer.Argument(None, help="Config file path"),
):
    """Configuration management."""
    if action == "init":
        typer.echo(generate_default_config())

    elif action == "validate":
        if not path:
            console.print("[red]Path required for validate[/]")
            raise typer.Exit(1)
        try:
            cfg = FixedHdrConfig.load(path)
        except (FileNotFoundError, ConfigurationError) as e:
            console.print(f"[red]Error:[/] {escape(str(e))}")
            raise typer.Exit(1)
        errors = cfg.validate()
        if errors:
            console.print("[red]Invalid configuration:[/]")
            for e in errors:
                console.print(f"  - {escape(e)}")
            raise typer.Exit(1)
        console.print(f"[green]Valid:[/] {path}")

    elif action == "dump":
        cfg = FixedHdrConfig.load(path) if path else load_config()
        typer.echo(cfg.to_yaml())

    else:
        console.print(f"[red]Unknown action:[/] {action}")
        console.print("Valid actions: init, validate, dump")
        raise typer.Exit(1)


# === VERSION COMMAND ===

@app.command()
def version():
    """Show version information."""
    console.print(f"[bold blue]fixed-hdr v{__version__}[/]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
