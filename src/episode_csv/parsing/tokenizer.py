"""Character-level tokenizer for delimited episode exports.

A single forward scan with three pieces of state (fields of the current row,
the current field buffer, and whether a quote is open) turns raw text into
rows of decoded fields.  The scan never fails: an unterminated quote is
closed implicitly at end of input and reported through ``ScanResult``.
"""

import logging

from pydantic import BaseModel

from episode_csv.parsing.patterns import BOM, DELIMITER, QUOTE
from episode_csv.parsing.schema import Table

logger = logging.getLogger(__name__)


class ScanResult(BaseModel):
    """Raw records from a scan plus the ambiguity flag."""

    records: list[list[str]]
    unterminated_quote: bool = False


# ─── Field Assembly ──────────────────────────────────────────────────────────


def _finish_field(buf: list[str], quoted_span: tuple[int, int] | None) -> str:
    """Join a field buffer, trimming whitespace that lies outside quoted content."""
    text = "".join(buf)
    if quoted_span is None:
        return text.strip()
    start, end = quoted_span
    return text[:start].lstrip() + text[start:end] + text[end:].rstrip()


def _scan(text: str, *, split_rows: bool, collapse_newlines: bool, keep_blank: bool) -> ScanResult:
    """Run the tokenizer state machine over *text*."""
    records: list[list[str]] = []
    row: list[str] = []
    buf: list[str] = []
    quoted_span: list[int] | None = None  # [start, end) of quoted content in buf
    in_quotes = False

    def end_field() -> None:
        nonlocal buf, quoted_span
        row.append(_finish_field(buf, tuple(quoted_span) if quoted_span else None))
        buf = []
        quoted_span = None

    def end_row() -> None:
        nonlocal row
        end_field()
        if keep_blank or any(field != "" for field in row):
            records.append(row)
        row = []

    n = len(text)
    i = 0
    while i < n:
        char = text[i]
        next_char = text[i + 1] if i + 1 < n else None

        if char == QUOTE:
            if in_quotes and next_char == QUOTE:
                # Doubled quote inside a quoted section is a literal quote
                buf.append(QUOTE)
                i += 2
                continue
            if in_quotes:
                in_quotes = False
                quoted_span[1] = len(buf)
            else:
                in_quotes = True
                if quoted_span is None:
                    quoted_span = [len(buf), len(buf)]
        elif char == DELIMITER and not in_quotes:
            end_field()
        elif char in "\r\n":
            # Treat "\r\n" as one terminator
            width = 2 if char == "\r" and next_char == "\n" else 1
            if in_quotes:
                buf.append(" " if collapse_newlines else text[i : i + width])
            elif split_rows:
                end_row()
            else:
                buf.append(text[i : i + width])
            i += width
            continue
        else:
            buf.append(char)
        i += 1

    unterminated = in_quotes
    if unterminated:
        quoted_span[1] = len(buf)

    if buf or row or quoted_span is not None:
        end_row()

    return ScanResult(records=records, unterminated_quote=unterminated)


# ─── Public API ──────────────────────────────────────────────────────────────


def scan(text: str, collapse_newlines: bool = False) -> ScanResult:
    """Split *text* into records of decoded fields, dropping all-blank rows.

    Line terminators inside quotes are kept verbatim unless *collapse_newlines*
    is set, in which case each one becomes a single space.
    """
    if text.startswith(BOM):
        text = text[len(BOM) :]
    result = _scan(text, split_rows=True, collapse_newlines=collapse_newlines, keep_blank=False)
    if result.unterminated_quote:
        logger.warning("Unterminated quote at end of input; closed implicitly")
    logger.debug("Scanned %d records", len(result.records))
    return result


def to_table(records: list[list[str]]) -> Table:
    """Build a Table from scanned records; the first record becomes the headers."""
    if not records:
        return Table(headers=[], rows=[])
    return Table(headers=records[0], rows=records[1:])


def tokenize(text: str, collapse_newlines: bool = False) -> Table:
    """Parse delimited text into a Table."""
    return to_table(scan(text, collapse_newlines=collapse_newlines).records)


def scan_line(line: str) -> ScanResult:
    """Scan one logical line as a single record, without splitting on line breaks."""
    result = _scan(line, split_rows=False, collapse_newlines=False, keep_blank=True)
    if not result.records:
        result.records.append([""])
    return result


def tokenize_line(line: str) -> list[str]:
    """Tokenize one logical line into its fields."""
    return scan_line(line).records[0]
