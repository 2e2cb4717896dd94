"""Translation of rustc diagnostics into actionable reports.

The compiler's stderr is never shown raw. It is matched against a small
ordered set of known failure patterns to produce a Suggestion, and every
line is re-emitted with a style chosen from its category. Styling changes
presentation only; apart from shortening file paths in location lines the
text of each diagnostic line is kept as-is.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from rich.text import Text

from lob.core.models import LineKind, Suggestion


HEADER = "✗ Compilation Error"
TIP = "Tip: Check your expression syntax and ensure all parentheses match"

PARSE_FLAGS = {
    "parse_csv": "--parse-csv",
    "parse_tsv": "--parse-tsv",
    "parse_json": "--parse-json",
}

LINE_STYLES: dict[LineKind, str] = {
    LineKind.ERROR: "bold red",
    LineKind.WARNING: "bold yellow",
    LineKind.LOCATION: "cyan",
    LineKind.SOURCE: "",
    LineKind.ANNOTATION: "cyan",
    LineKind.CARET: "bold red",
    LineKind.HELP: "blue",
    LineKind.NOTE: "cyan",
    LineKind.SUMMARY: "red",
    LineKind.OTHER: "",
    LineKind.BLANK: "",
}

_GUTTER = re.compile(r"^\s*(\d+)?\s*\|")
_POSITION = re.compile(r"(.+?):(\d+(?::\d+)?)$")


def _string_number_comparison(stderr: str, expression: str | None) -> Suggestion | None:
    if "mismatched types" not in stderr and "PartialOrd" not in stderr:
        return None
    if "String" not in stderr or "integer" not in stderr:
        return None
    return Suggestion(
        problem="Cannot compare string with number",
        fixes=(
            "Parse to number first: x.parse::<i32>().unwrap()",
            "Compare string lengths instead: x.len() > 5",
            'Compare as strings: x > "5"',
        ),
    )


def _unknown_function(stderr: str, expression: str | None) -> Suggestion | None:
    if "cannot find function" not in stderr:
        return None
    for method, flag in PARSE_FLAGS.items():
        if expression and f".{method}" in expression:
            return Suggestion(
                problem=f"{method}() is not a method",
                fixes=(f"Use {flag} flag: lob {flag} '_.filter(...)'",),
            )
    return Suggestion(
        problem="Unknown function or method",
        fixes=(
            "Check available operations: filter, map, take, skip, count, sum",
            "See docs: https://github.com/olirice/lob",
        ),
    )


def _closure_mismatch(stderr: str, expression: str | None) -> Suggestion | None:
    if "mismatched types" not in stderr or "closure" not in stderr:
        return None
    return Suggestion(
        problem="Type mismatch in closure",
        fixes=(
            "Check your closure parameter types",
            "Use explicit types: |x: &Type| if inference fails",
        ),
    )


def _string_index(stderr: str, expression: str | None) -> Suggestion | None:
    if "cannot index" not in stderr or "with `&str`" not in stderr:
        return None
    return Suggestion(
        problem="Cannot index string with string",
        fixes=(
            "For CSV: use --parse-csv flag to parse files",
            'Access columns with: row["column_name"]',
        ),
    )


def _missing_unwrap(stderr: str, expression: str | None) -> Suggestion | None:
    if "Option<" not in stderr or "expected" not in stderr:
        return None
    return Suggestion(
        problem="Operation returns Option - need to unwrap",
        fixes=(
            "Extract value: value.unwrap()",
            "With fallback: value.unwrap_or(default)",
        ),
    )


def _not_iterator(stderr: str, expression: str | None) -> Suggestion | None:
    if "not an iterator" not in stderr and not (
        "doesn't implement" in stderr and "Iterator" in stderr
    ):
        return None
    return Suggestion(
        problem="Value is not an iterator",
        fixes=(
            "Create iterator: value.iter()",
            "Check if result is terminal (count, sum return values, not iterators)",
        ),
    )


SuggestionRule = Callable[[str, str | None], Suggestion | None]

# Order matters: the first matching rule wins.
SUGGESTION_RULES: tuple[SuggestionRule, ...] = (
    _string_number_comparison,
    _unknown_function,
    _closure_mismatch,
    _string_index,
    _missing_unwrap,
    _not_iterator,
)


def get_suggestion(stderr: str, expression: str | None = None) -> Suggestion | None:
    """Match compiler output against known failure patterns.

    Args:
        stderr: Raw compiler error output.
        expression: The user expression that produced the program, if known.

    Returns:
        The suggestion of the first matching rule, or None.
    """
    for rule in SUGGESTION_RULES:
        suggestion = rule(stderr, expression)
        if suggestion is not None:
            return suggestion
    return None


def classify_line(line: str) -> LineKind:
    """Assign a presentation category to one line of compiler output."""
    stripped = line.strip()
    if not stripped:
        return LineKind.BLANK
    if line.startswith(("error: aborting", "error: could not compile")):
        return LineKind.SUMMARY
    if line.startswith(("error:", "error[")):
        return LineKind.ERROR
    if line.startswith(("warning:", "warning[")):
        return LineKind.WARNING
    if stripped.startswith("-->"):
        return LineKind.LOCATION
    gutter = _GUTTER.match(line)
    if gutter:
        if gutter.group(1):
            return LineKind.SOURCE
        return LineKind.CARET if "^" in line[gutter.end() :] else LineKind.ANNOTATION
    if "^" in stripped and set(stripped) <= {"^", " ", "|", "-"}:
        return LineKind.CARET
    if stripped.startswith("= help:"):
        return LineKind.HELP
    if stripped.startswith("= note:"):
        return LineKind.NOTE
    return LineKind.OTHER


def simplify_location(line: str) -> str:
    """Shorten the path of a ``--> path:line:col`` line to its base name.

    Lines that do not look like locations are returned unchanged.
    """
    _, arrow, rest = line.partition("-->")
    if not arrow:
        return line
    match = _POSITION.match(rest.strip())
    if match is None:
        return line
    path, position = match.groups()
    filename = re.split(r"[\\/]", path)[-1]
    return f"--> {filename}:{position}"


def _suggestion_block(suggestion: Suggestion) -> list[Text]:
    lines = [
        Text.assemble(("  Problem: ", "bold yellow"), suggestion.problem),
        Text("  How to fix:", style="bold green"),
    ]
    lines.extend(Text(f"    • {fix}", style="green") for fix in suggestion.fixes)
    lines.append(Text())
    return lines


def _diagnostic_line(line: str) -> list[Text]:
    kind = classify_line(line)
    if kind is LineKind.BLANK:
        return [Text()]
    if kind is LineKind.LOCATION:
        line = simplify_location(line)
    styled = Text(f"  {line}", style=LINE_STYLES[kind])
    if kind is LineKind.SUMMARY:
        return [Text(), styled]
    return [styled]


def format_compilation_error(stderr: str, expression: str | None = None) -> Text:
    """Build the user-facing report for a failed compilation.

    Args:
        stderr: Raw compiler error output. Partial or malformed text is
            accepted.
        expression: The user expression, echoed back when given.

    Returns:
        Styled report. Use ``.plain`` for the uncoloured text.
    """
    lines: list[Text] = [Text(HEADER, style="bold red"), Text()]

    if expression is not None:
        lines.append(
            Text.assemble(("  Your expression: ", "bold cyan"), (expression, "yellow"))
        )
        lines.append(Text())

    suggestion = get_suggestion(stderr, expression)
    if suggestion is not None:
        lines.extend(_suggestion_block(suggestion))

    for line in stderr.splitlines():
        lines.extend(_diagnostic_line(line))

    lines.append(Text())
    lines.append(Text(TIP, style="blue"))
    return Text("\n").join(lines)
