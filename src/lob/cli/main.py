"""CLI command for lob."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console

from lob import __version__
from lob.cli.formatting import cache_stats_lines, print_welcome, run_stats_lines
from lob.config import Settings
from lob.core.exceptions import (
    CompilationError,
    ExecutionError,
    InvalidExpressionError,
    LobError,
)
from lob.core.models import InputFormat, InputSource, OutputFormat
from lob.core.synthesis import synthesize
from lob.log import configure_logging


app = typer.Typer(
    name="lob",
    help="Run Rust data pipeline one-liners.",
    add_completion=False,
)


def _stdin_is_terminal() -> bool:
    return sys.stdin.isatty()


def _stdout_is_terminal() -> bool:
    return sys.stdout.isatty()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lob {__version__}")
        raise typer.Exit()


def _input_format(parse_csv: bool, parse_tsv: bool, parse_json: bool) -> InputFormat:
    """Map the mutually exclusive --parse-* flags to an input format."""
    selected = [
        fmt
        for flag, fmt in (
            (parse_csv, InputFormat.CSV),
            (parse_tsv, InputFormat.TSV),
            (parse_json, InputFormat.JSON_LINES),
        )
        if flag
    ]
    if len(selected) > 1:
        raise InvalidExpressionError(
            "Only one of --parse-csv, --parse-tsv or --parse-json may be given"
        )
    return selected[0] if selected else InputFormat.LINES


def _output_format(name: str | None) -> OutputFormat:
    if name is None:
        return OutputFormat.default_for(_stdout_is_terminal())
    output_format = OutputFormat.from_name(name)
    if output_format is None:
        raise InvalidExpressionError(f"Unknown output format: {name}")
    return output_format


def _report_error(error: LobError) -> int:
    """Print an error to stderr and return the exit status to use."""
    if isinstance(error, CompilationError):
        Console(stderr=True, highlight=False).print(error.report, soft_wrap=True)
        return 1
    typer.echo(f"Error: {error}", err=True)
    if error.recovery_hint:
        typer.echo(f"Hint: {error.recovery_hint}", err=True)
    if isinstance(error, ExecutionError):
        return error.exit_code
    return 1


@app.command()
def run(
    expression: str | None = typer.Argument(
        None,
        help="Lob expression to execute.",
        show_default=False,
    ),
    files: list[Path] | None = typer.Argument(
        None,
        help="Input files (omit to read from stdin).",
        show_default=False,
    ),
    parse_csv: bool = typer.Option(
        False,
        "--parse-csv",
        help="Parse input as CSV with headers.",
    ),
    parse_tsv: bool = typer.Option(
        False,
        "--parse-tsv",
        help="Parse input as TSV with headers.",
    ),
    parse_json: bool = typer.Option(
        False,
        "--parse-json",
        help="Parse input as JSON lines.",
    ),
    output_format: str | None = typer.Option(
        None,
        "--format",
        "-f",
        metavar="FORMAT",
        help="Output format: debug, json, jsonl, csv or table.",
    ),
    show_source: bool = typer.Option(
        False,
        "--show-source",
        "-s",
        help="Show generated source code without executing.",
    ),
    clear_cache: bool = typer.Option(
        False,
        "--clear-cache",
        help="Clear the compilation cache.",
    ),
    cache_stats: bool = typer.Option(
        False,
        "--cache-stats",
        help="Show cache statistics.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log compilation progress to stderr.",
    ),
    stats: bool = typer.Option(
        False,
        "--stats",
        help="Show performance statistics after execution.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Compile a Rust expression over the input and run it."""
    from lob.core.services import Pipeline

    configure_logging(verbose)
    paths = files or []

    try:
        if clear_cache or cache_stats:
            settings = Settings.from_env()
            cache = Pipeline.from_settings(settings).cache
            if clear_cache:
                cache.clear()
                typer.echo("Cache cleared successfully")
            else:
                for line in cache_stats_lines(cache.stats(), settings.cache_dir):
                    typer.echo(line)
            return

        if expression is None:
            if not paths and _stdin_is_terminal():
                print_welcome()
                return
            raise InvalidExpressionError(
                "No expression provided. Use --help for usage."
            )

        input_source = InputSource.from_paths(
            paths, _input_format(parse_csv, parse_tsv, parse_json)
        )
        input_source.validate()
        fmt = _output_format(output_format)

        if show_source:
            typer.echo(synthesize(expression, input_source, fmt))
            return

        pipeline = Pipeline.from_settings(Settings.from_env())
        report = pipeline.run(expression, input_source, fmt)
    except LobError as e:
        raise typer.Exit(_report_error(e)) from None

    if stats:
        for line in run_stats_lines(report):
            typer.echo(line, err=True)


def main() -> None:
    """Entry point for the CLI."""
    app()
