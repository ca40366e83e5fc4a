"""Pydantic models for parsed episode exports and parse diagnostics.

``Table`` is the loose shape the tokenizer and repairer produce.
``RectangularTable`` adds the row-width invariant and is only built by the
row-shape validator, so anything downstream of validation can index any
column of any row safely.
"""

from enum import Enum

from pydantic import BaseModel, model_validator


class Table(BaseModel):
    """Header row plus data rows of decoded (unescaped) field values."""

    headers: list[str]
    rows: list[list[str]]

    @property
    def width(self) -> int:
        return len(self.headers)


class RectangularTable(Table):
    """A Table whose every row has exactly len(headers) cells.

    The model_validator guarantees the invariant at construction time; a
    table that violates it cannot exist.
    """

    @model_validator(mode="after")
    def validate_row_widths(self) -> "RectangularTable":
        """Ensure every row has exactly len(headers) cells."""
        n_cols = len(self.headers)
        for i, row in enumerate(self.rows):
            if len(row) != n_cols:
                raise ValueError(f"Row {i} has {len(row)} cells, expected {n_cols} (matching headers)")
        return self


class DiagnosticKind(str, Enum):
    PARSE_AMBIGUITY = "parse_ambiguity"
    ROW_SHAPE_MISMATCH = "row_shape_mismatch"
    GLOBAL_SHAPE_CORRUPTION = "global_shape_corruption"
    CELL_PARSE_FAILURE = "cell_parse_failure"


class Diagnostic(BaseModel):
    """A non-fatal problem found while parsing or reconciling an export."""

    kind: DiagnosticKind
    message: str
    row_index: int | None = None
    line: int | None = None


class RowMismatch(BaseModel):
    """A row whose field count differed from the header width before repair."""

    row_index: int
    expected: int
    actual: int

    @property
    def line(self) -> int:
        # 1 for the header row, 1 for 1-based display
        return self.row_index + 2

    def to_diagnostic(self) -> Diagnostic:
        action = "padded" if self.actual < self.expected else "truncated"
        return Diagnostic(
            kind=DiagnosticKind.ROW_SHAPE_MISMATCH,
            message=f"Line {self.line} has {self.actual} fields, expected {self.expected} ({action})",
            row_index=self.row_index,
            line=self.line,
        )
