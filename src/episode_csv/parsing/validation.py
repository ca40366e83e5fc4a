"""Row-shape validation: force every row to the header width.

Short rows are right-padded with empty strings and long rows lose their
trailing fields.  The repair is lossy but deterministic, and every repaired
row is recorded so callers can surface a warning.  Missing or extra rows are
not this module's concern.
"""

import logging

from pydantic import BaseModel

from episode_csv.parsing.schema import Diagnostic, RectangularTable, RowMismatch, Table

logger = logging.getLogger(__name__)


class ValidationReport(BaseModel):
    table: RectangularTable
    mismatches: list[RowMismatch]

    def diagnostics(self) -> list[Diagnostic]:
        return [mismatch.to_diagnostic() for mismatch in self.mismatches]


def fit_row(row: list[str], width: int) -> list[str]:
    """Return *row* padded with "" or truncated to exactly *width* cells."""
    if len(row) >= width:
        return list(row[:width])
    return list(row) + [""] * (width - len(row))


def count_mismatches(table: Table) -> int:
    """Number of rows whose length differs from the header width."""
    return sum(1 for row in table.rows if len(row) != table.width)


def validate(table: Table) -> ValidationReport:
    """Pad/truncate every row to the header width and record each repair."""
    width = table.width
    mismatches: list[RowMismatch] = []
    fixed_rows: list[list[str]] = []

    for i, row in enumerate(table.rows):
        if len(row) != width:
            mismatch = RowMismatch(row_index=i, expected=width, actual=len(row))
            mismatches.append(mismatch)
            logger.debug("Line %d: %d fields, expected %d", mismatch.line, len(row), width)
        fixed_rows.append(fit_row(row, width))

    if mismatches:
        logger.warning("Repaired %d of %d rows with the wrong field count", len(mismatches), len(table.rows))

    return ValidationReport(
        table=RectangularTable(headers=list(table.headers), rows=fixed_rows),
        mismatches=mismatches,
    )
