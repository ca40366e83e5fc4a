"""Render a Table back to delimited text; the inverse of the tokenizer."""

from episode_csv.parsing.patterns import DELIMITER, LINE_TERMINATOR, QUOTE, SPECIAL_CHARS
from episode_csv.parsing.schema import Table


def escape_field(value: str | None) -> str:
    """Quote a field if it holds a delimiter, quote, line break, or edge whitespace."""
    if value is None:
        return ""
    text = str(value)
    needs_quotes = any(char in text for char in SPECIAL_CHARS) or text != text.strip()
    if not needs_quotes:
        return text
    return QUOTE + text.replace(QUOTE, QUOTE + QUOTE) + QUOTE


def serialize_row(row: list[str]) -> str:
    return DELIMITER.join(escape_field(field) for field in row)


def serialize(table: Table) -> str:
    """Join the header and data rows with single line terminators (none trailing)."""
    lines = [serialize_row(table.headers)]
    lines.extend(serialize_row(row) for row in table.rows)
    return LINE_TERMINATOR.join(lines)
