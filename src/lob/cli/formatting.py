"""Shared formatting helpers for the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text


if TYPE_CHECKING:
    from pathlib import Path

    from lob.core.models import CacheStats, RunReport


REPO_URL = "https://github.com/olirice/lob"

EXAMPLES = [
    (
        "# Filter even numbers",
        "seq 1 100 | lob '_.filter(|x| x.parse::<i32>().unwrap() % 2 == 0).count()'",
        "# Output: 50",
    ),
    (
        "# Process file directly",
        "lob data.txt '_.filter(|x| x.len() > 5).take(10)'",
        "# Output: First 10 lines longer than 5 chars",
    ),
    (
        "# Parse CSV data",
        "lob users.csv --parse-csv "
        "'_.filter(|r| r[\"age\"].parse::<i32>().unwrap() > 18)'",
        "# Output: Rows where age > 18",
    ),
    ("# Multiple files", "lob file1.txt file2.txt '_.unique().count()'", None),
]

OPERATIONS = [
    ("Selection: ", "filter, take, skip, unique, drop_while"),
    ("Transform: ", "map, enumerate, zip, flatten"),
    ("Grouping:  ", "chunk, window, group_by"),
    ("Terminal:  ", "count, sum, min, max, to_list"),
]

INPUT_FORMATS = [
    "--parse-csv         Parse input as CSV with headers",
    "--parse-tsv         Parse input as TSV with headers",
    "--parse-json        Parse each line as JSON",
]

OUTPUT_FORMATS = [
    "--format debug      Rust debug format (default on a terminal)",
    "--format json       JSON array",
    "--format jsonl      JSON lines (default when piped)",
    "--format csv        CSV output",
    "--format table      Table output",
]

LEARN_MORE = [
    "lob --help              Full documentation",
    "lob --show-source EXPR  See generated Rust code",
    "lob --cache-stats       View compilation cache",
]


def format_duration(seconds: float) -> str:
    """Format a duration with a unit suited to its magnitude.

    Examples:
        >>> format_duration(0.0000425)
        '42.5µs'
        >>> format_duration(0.25)
        '250.00ms'
        >>> format_duration(2.5)
        '2.50s'
    """
    if seconds < 0.001:
        return f"{seconds * 1_000_000:.1f}µs"
    if seconds < 1.0:
        return f"{seconds * 1000:.2f}ms"
    return f"{seconds:.2f}s"


def cache_stats_lines(stats: CacheStats, cache_dir: Path) -> list[str]:
    """Lines printed by ``lob --cache-stats``."""
    return [
        "Cache statistics:",
        f"  Cached binaries: {stats.binary_count}",
        f"  Total size: {stats.format_size()}",
        f"  Cache directory: {cache_dir}",
    ]


def run_stats_lines(report: RunReport) -> list[str]:
    """Lines printed to stderr by ``lob --stats`` after a run."""
    cache = (
        "Hit (binary reused)" if report.compile_result.cache_hit else "Miss (compiled)"
    )
    return [
        "",
        "Statistics:",
        f"  Compilation time: {format_duration(report.compile_seconds)}",
        f"  Execution time:   {format_duration(report.execute_seconds)}",
        f"  Total time:       {format_duration(report.total_seconds)}",
        f"  Cache:            {cache}",
    ]


def print_welcome(console: Console | None = None) -> None:
    """Print the usage screen shown when lob runs without arguments."""
    console = console or Console(highlight=False)

    def heading(title: str) -> None:
        console.print(Text(title, style="bold"))

    def row(*parts: str | tuple[str, str]) -> None:
        console.print(Text.assemble("    ", *parts))

    console.print(Text("lob - Embedded Rust Pipeline Tool", style="bold cyan"))
    console.print()

    heading("USAGE:")
    row("lob [OPTIONS] <EXPRESSION> [FILE...]")
    row("command | lob [OPTIONS] <EXPRESSION>")
    console.print()

    heading("EXAMPLES:")
    for comment, command, output in EXAMPLES:
        row((comment, "dim"))
        row(command)
        if output:
            row((output, "dim"))
        console.print()

    heading("COMMON OPERATIONS:")
    for label, names in OPERATIONS:
        row((label, "cyan"), " ", names)
    console.print()

    for title, lines in (
        ("INPUT FORMATS:", INPUT_FORMATS),
        ("OUTPUT FORMATS:", OUTPUT_FORMATS),
        ("LEARN MORE:", LEARN_MORE),
    ):
        heading(title)
        for line in lines:
            row(line)
        console.print()

    console.print(Text(REPO_URL, style="dim"))
