"""Rust program synthesis for lob expressions.

A lob expression is a fragment such as ``_.filter(|x| x.len() > 3)``. This
module wraps it in a complete ``main`` function that acquires the input
sequence, binds the expression and prints the result in the requested
output format. Generation is a pure function of its inputs: the cache key
is a hash of the returned text, so identical inputs must produce identical
bytes.
"""

from __future__ import annotations

from lob.core.models import InputFormat, InputSource, OutputFormat


INPUT_MARKER = "_"
INPUT_BINDING = "stdin_data"

PRELUDE_IMPORT = "use lob_prelude::*;"
JSON_IMPORT = "use lob_prelude::serde_json;"
TABLE_IMPORT = "use lob_prelude::tabled::builder::Builder;"

# Substring tokens marking an expression that already reduces to a single
# value. This is a lexical heuristic, not a parse: a closure that merely
# mentions one of these calls also classifies its expression as terminal.
TERMINAL_TOKENS = (
    ".collect(",
    ".count()",
    ".sum(",
    ".sum::",
    ".min()",
    ".max()",
    ".reduce(",
    ".fold(",
    ".fold_left(",
    ".first()",
    ".last()",
    ".to_list()",
    ".any(",
    ".all(",
)

# (format, reads files) -> acquisition call
ACQUISITION_CALLS: dict[tuple[InputFormat, bool], str] = {
    (InputFormat.LINES, False): "input()",
    (InputFormat.LINES, True): "input_from_files(&files)",
    (InputFormat.CSV, False): "input_csv()",
    (InputFormat.CSV, True): "input_csv_from_files(&files)",
    (InputFormat.TSV, False): "input_tsv()",
    (InputFormat.TSV, True): "input_tsv_from_files(&files)",
    (InputFormat.JSON_LINES, False): "input_json()",
    (InputFormat.JSON_LINES, True): "input_json_from_files(&files)",
}

FILES_BINDING = (
    "let files: Vec<std::path::PathBuf> = "
    "std::env::args_os().skip(1).map(std::path::PathBuf::from).collect();"
)

CELL_HELPER = """\
fn lob_cell(value: &serde_json::Value) -> String {
    match value {
        serde_json::Value::String(s) => s.clone(),
        serde_json::Value::Null => String::new(),
        other => other.to_string(),
    }
}

fn lob_headers(first: &serde_json::Value) -> Option<Vec<String>> {
    let mut headers: Vec<String> = first.as_object()?.keys().cloned().collect();
    headers.sort();
    Some(headers)
}

fn lob_row(row: &serde_json::Value, headers: &Option<Vec<String>>) -> Vec<String> {
    match headers {
        Some(headers) => headers
            .iter()
            .map(|h| lob_cell(row.get(h.as_str()).unwrap_or(&serde_json::Value::Null)))
            .collect(),
        None => vec![lob_cell(row)],
    }
}
"""

CSV_HELPER = """\
fn lob_csv_field(field: &str) -> String {
    let special = [',', '"', '\\n', '\\r'];
    if field.contains(&special[..]) {
        format!("\\"{}\\"", field.replace('"', "\\"\\""))
    } else {
        field.to_string()
    }
}

fn lob_write_csv(rows: &[serde_json::Value]) {
    let Some(first) = rows.first() else { return };
    let headers = lob_headers(first);
    if let Some(names) = &headers {
        let line: Vec<String> = names.iter().map(|h| lob_csv_field(h)).collect();
        println!("{}", line.join(","));
    }
    for row in rows {
        let cells = lob_row(row, &headers);
        let line: Vec<String> = cells.iter().map(|c| lob_csv_field(c)).collect();
        println!("{}", line.join(","));
    }
}
"""

TABLE_HELPER = """\
fn lob_print_table(rows: &[serde_json::Value]) {
    let Some(first) = rows.first() else { return };
    let headers = lob_headers(first);
    let mut builder = Builder::default();
    builder.push_record(headers.clone().unwrap_or_else(|| vec!["value".to_string()]));
    for row in rows {
        builder.push_record(lob_row(row, &headers));
    }
    println!("{}", builder.build());
}
"""


# (format, terminal) -> output statements; CSV and table outputs are
# built by _materialize and are not listed here.
OUTPUT_STAGES: dict[tuple[OutputFormat, bool], tuple[str, ...]] = {
    (OutputFormat.DEBUG, False): (
        "for item in result {",
        '    println!("{:?}", item);',
        "}",
    ),
    (OutputFormat.DEBUG, True): ('println!("{:?}", result);',),
    (OutputFormat.JSON_LINES, False): (
        "for item in result {",
        '    println!("{}", serde_json::to_string(&item).unwrap());',
        "}",
    ),
    (OutputFormat.JSON_LINES, True): (
        'println!("{}", serde_json::to_string(&result).unwrap());',
    ),
    (OutputFormat.JSON, False): (
        "let items: Vec<_> = result.collect();",
        'println!("{}", serde_json::to_string(&items).unwrap());',
    ),
    (OutputFormat.JSON, True): (
        'println!("{}", serde_json::to_string(&result).unwrap());',
    ),
}

ROW_WRITERS = {
    OutputFormat.CSV: "lob_write_csv(&rows);",
    OutputFormat.TABLE: "lob_print_table(&rows);",
}


def is_terminal_expression(expression: str) -> bool:
    """Guess whether an expression already reduces to a single value.

    Args:
        expression: The user expression.

    Returns:
        True if any terminal-operation token occurs in the raw text.
    """
    return any(token in expression for token in TERMINAL_TOKENS)


def uses_input(expression: str) -> bool:
    """True when the expression starts from the input sequence marker."""
    return expression.strip().startswith(INPUT_MARKER)


def acquisition_call(input_source: InputSource) -> str:
    """Return the prelude call that produces the input sequence."""
    return ACQUISITION_CALLS[(input_source.format, not input_source.is_stdin)]


def _imports(output_format: OutputFormat) -> list[str]:
    lines = [PRELUDE_IMPORT]
    if output_format.needs_json:
        lines.append(JSON_IMPORT)
    if output_format is OutputFormat.TABLE:
        lines.append(TABLE_IMPORT)
    return lines


def _helpers(output_format: OutputFormat) -> list[str]:
    if output_format is OutputFormat.CSV:
        return [CELL_HELPER, CSV_HELPER]
    if output_format is OutputFormat.TABLE:
        return [CELL_HELPER, TABLE_HELPER]
    return []


def _materialize(terminal: bool) -> list[str]:
    """Bind the result as a Vec of JSON rows for row-oriented writers."""
    items = "vec![result]" if terminal else "result.collect()"
    return [
        f"let items: Vec<_> = {items};",
        "let rows: Vec<serde_json::Value> = items",
        "    .iter()",
        "    .map(|item| serde_json::to_value(item).unwrap())",
        "    .collect();",
    ]


def _output_stage(output_format: OutputFormat, terminal: bool) -> list[str]:
    if output_format.materializes:
        return [*_materialize(terminal), ROW_WRITERS[output_format]]
    return list(OUTPUT_STAGES[(output_format, terminal)])


def synthesize(
    expression: str,
    input_source: InputSource,
    output_format: OutputFormat,
) -> str:
    """Render the complete Rust program for an expression.

    The expression itself is not validated; syntax and type errors are
    reported by the compiler.

    Args:
        expression: The user expression. The first ``_`` is replaced with
            the acquired input sequence when the expression starts with it.
        input_source: Input files and parsing format.
        output_format: How results are printed.

    Returns:
        Program source text, byte-identical for identical arguments.

    Example:
        >>> source = synthesize(
        ...     "_.count()",
        ...     InputSource(),
        ...     OutputFormat.DEBUG,
        ... )
        >>> "let stdin_data = input();" in source
        True
    """
    body: list[str] = []

    if uses_input(expression):
        if not input_source.is_stdin:
            body.append(FILES_BINDING)
        body.append(f"let {INPUT_BINDING} = {acquisition_call(input_source)};")
        expression = expression.replace(INPUT_MARKER, INPUT_BINDING, 1)

    body.append(f"let result = {expression};")
    body.extend(_output_stage(output_format, is_terminal_expression(expression)))

    parts = ["\n".join(_imports(output_format)), *_helpers(output_format)]
    main = ["fn main() {", *(f"    {line}" for line in body), "}"]
    parts.append("\n".join(main))
    return "\n\n".join(part.rstrip("\n") for part in parts) + "\n"
