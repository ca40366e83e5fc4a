"""Best-effort repair of exports whose fields were broken across physical lines.

Some scraper builds write raw, unescaped line breaks inside field values.  The
tokenizer cannot tell those apart from row breaks, so most rows come out with
the wrong field count.  When that happens for a majority of rows, this module
re-reads the raw text one physical line at a time and stitches lines back
into logical rows:

  1. Append the next physical line to an accumulator, joined by one space
     (the original line breaks inside a field are lost on purpose).
  2. Tokenize the accumulator as a single line.
  3. Quote still open          -> keep accumulating, up to a line limit.
     Exactly the header width  -> emit it as a row, reset the accumulator.
     More than the header width -> look for the start of the next row with a
                                   row-start finder, emit the left part, keep
                                   the right part as the new accumulator.
     Fewer                      -> keep accumulating.

Whatever is left at end of input is emitted as a final attempt, matching or
not, so that partial data survives.  The heuristic can mis-stitch rows whose
content happens to look like a row start; residual width mismatches are left
for the row-shape validator to flag.  Rows whose fields are all empty are
dropped, so the output survives a serialize/tokenize round trip.
"""

import logging
import re
from typing import Callable

from pydantic import BaseModel

from episode_csv.config import MAX_MERGE_LINES, REPAIR_THRESHOLD
from episode_csv.parsing.patterns import BOM, PHYSICAL_LINE_BREAK_RE, ROW_ANCHOR_RE
from episode_csv.parsing.schema import Table
from episode_csv.parsing.tokenizer import scan_line, tokenize_line
from episode_csv.parsing.validation import count_mismatches

logger = logging.getLogger(__name__)

# (accumulator, header width) -> offset where the next row starts, or None
RowStartFinder = Callable[[str, int], int | None]


class RepairReport(BaseModel):
    """Rows rebuilt by the repair pass plus counters describing the work done."""

    table: Table
    merged_rows: int = 0  # rows assembled from more than one physical line
    splits: int = 0  # times an over-long accumulator was cut at a row start
    residual: int = 0  # emitted rows that still do not match the header width


# ─── Pre-check ───────────────────────────────────────────────────────────────


def needs_repair(table: Table, threshold: float = REPAIR_THRESHOLD) -> bool:
    """Return True if the share of mismatched rows is above *threshold*."""
    if not table.rows:
        return False
    mismatched = count_mismatches(table)
    share = mismatched / len(table.rows)
    logger.debug("Shape pre-check: %d/%d rows mismatched (%.0f%%)", mismatched, len(table.rows), share * 100)
    return share > threshold


# ─── Row-start Strategy ──────────────────────────────────────────────────────


class AnchorRowStart:
    """Find the next row start with a regex anchor.

    Every match after offset 0 is a candidate.  The first candidate whose left
    part tokenizes to exactly the header width wins; if none does, the first
    candidate is used.
    """

    def __init__(self, pattern: re.Pattern = ROW_ANCHOR_RE):
        self.pattern = pattern

    def candidates(self, accumulator: str) -> list[int]:
        offsets: list[int] = []
        pos = 1
        while pos < len(accumulator):
            match = self.pattern.search(accumulator, pos)
            if match is None:
                break
            offsets.append(match.start())
            pos = match.start() + 1
        return offsets

    def __call__(self, accumulator: str, width: int) -> int | None:
        offsets = self.candidates(accumulator)
        if not offsets:
            return None
        for offset in offsets:
            if len(tokenize_line(accumulator[:offset].rstrip())) == width:
                return offset
        return offsets[0]


# ─── Merge Loop ──────────────────────────────────────────────────────────────


def physical_lines(text: str) -> list[str]:
    """Return the stripped, non-blank physical lines of *text*."""
    if text.startswith(BOM):
        text = text[len(BOM) :]
    return [line.strip() for line in PHYSICAL_LINE_BREAK_RE.split(text) if line.strip()]


def repair(text: str, row_start: RowStartFinder | None = None, max_merge_lines: int = MAX_MERGE_LINES) -> RepairReport:
    """Re-merge physical lines of *text* into logical rows.

    *row_start* locates the next row inside an over-long accumulator; it
    defaults to the integer/name/date anchor.  An accumulator that is over
    long with no row start, or that holds a quote still open, keeps absorbing
    lines until it spans *max_merge_lines* physical lines.  Past that, an
    over-long one is emitted as-is and an open-quote one gives up its first
    line as a row of its own.  Rows whose fields are all empty are dropped,
    as the tokenizer drops them.
    """
    lines = physical_lines(text)
    if not lines:
        return RepairReport(table=Table(headers=[], rows=[]))

    headers = tokenize_line(lines[0])
    width = len(headers)
    finder = row_start or AnchorRowStart()

    rows: list[list[str]] = []
    merged_rows = 0
    splits = 0
    blank = 0
    parts: list[str] = []  # physical lines (or a split remainder) in the accumulator

    def emit(fields: list[str], n_lines: int) -> None:
        nonlocal merged_rows, blank
        if not any(field != "" for field in fields):
            blank += 1
            return
        rows.append(fields)
        merged_rows += int(n_lines > 1)

    for line in lines[1:]:
        parts.append(line)

        while parts:
            acc = " ".join(parts)
            scanned = scan_line(acc)
            fields = scanned.records[0]
            if scanned.unterminated_quote:
                # A quoted field is still open; the row cannot be complete yet
                if len(parts) < max_merge_lines:
                    break
                logger.warning("Quote left open across %d lines; emitting line %r on its own", len(parts), parts[0])
                emit(tokenize_line(parts[0]), 1)
                parts = parts[1:]
                continue
            if len(fields) == width:
                emit(fields, len(parts))
                parts = []
                break
            if len(fields) < width:
                break

            # Too many fields: part of the next row is in the accumulator
            offset = finder(acc, width)
            if offset is None or offset <= 0:
                if len(parts) >= max_merge_lines:
                    logger.warning("No row start found within %d lines; emitting %d fields as-is", len(parts), len(fields))
                    emit(fields, len(parts))
                    parts = []
                break

            emit(tokenize_line(acc[:offset].rstrip()), len(parts))
            parts = [acc[offset:]]
            splits += 1
            logger.debug("Split accumulator at offset %d", offset)

    if parts:
        # Final attempt; kept even if the width is wrong
        emit(tokenize_line(" ".join(parts)), len(parts))

    residual = sum(1 for row in rows if len(row) != width)
    logger.info(
        "Repair rebuilt %d rows from %d physical lines (%d merged, %d splits, %d residual, %d blank dropped)",
        len(rows),
        len(lines) - 1,
        merged_rows,
        splits,
        residual,
        blank,
    )
    return RepairReport(table=Table(headers=headers, rows=rows), merged_rows=merged_rows, splits=splits, residual=residual)
