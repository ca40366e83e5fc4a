"""Optional table clean-ups applied before reconciliation.

  clean_title_cells   -- strip the show's own title out of episode name cells
  drop_columns        -- remove columns the importer should not receive
  normalize_overview  -- collapse line breaks in the overview/description column

Each returns a new table and leaves its input untouched.  A row left with
only empty cells is dropped and logged: it would not survive being written
back and re-read.
"""

import logging

from pydantic import BaseModel

from episode_csv.parsing.patterns import OVERVIEW_ALIASES, WHITESPACE_RUN_RE
from episode_csv.parsing.schema import RectangularTable
from episode_csv.reconcile.columns import find_column, normalize_header

logger = logging.getLogger(__name__)


class TitleCleanup(BaseModel):
    row_index: int
    original_value: str
    cleaned_value: str


def _drop_blank_rows(rows: list[list[str]], step: str) -> list[list[str]]:
    kept = [row for row in rows if any(cell != "" for cell in row)]
    if len(kept) != len(rows):
        logger.warning("%s left %d rows with only empty cells; dropped them", step, len(rows) - len(kept))
    return kept


# ─── Title Cleaning ──────────────────────────────────────────────────────────


def clean_name_cell(value: str, item_title: str) -> str:
    """Remove *item_title* and everything after it from a name cell."""
    idx = value.find(item_title)
    if idx == -1:
        return value
    if idx == 0:
        return ""
    return value[:idx].strip()


def clean_title_cells(
    table: RectangularTable, name_column_index: int, item_title: str
) -> tuple[RectangularTable, list[TitleCleanup]]:
    """Strip *item_title* from every name cell that contains it."""
    if not item_title:
        return table, []

    cleanups: list[TitleCleanup] = []
    rows: list[list[str]] = []
    for i, row in enumerate(table.rows):
        value = row[name_column_index].strip()
        if item_title in value:
            cleaned = clean_name_cell(value, item_title)
            cleanups.append(TitleCleanup(row_index=i, original_value=value, cleaned_value=cleaned))
            row = list(row)
            row[name_column_index] = cleaned
        rows.append(row)

    logger.info("Removed title %r from %d name cells", item_title, len(cleanups))
    return RectangularTable(headers=list(table.headers), rows=_drop_blank_rows(rows, "Title cleaning")), cleanups


# ─── Column Removal ──────────────────────────────────────────────────────────


def _find_named_column(headers: list[str], name: str) -> int | None:
    """Exact (case-insensitive) header match first, then containment."""
    target = name.casefold()
    for idx, header in enumerate(headers):
        if normalize_header(header) == target:
            return idx
    idx, _ = find_column(headers, (name,))
    return idx


def drop_columns(table: RectangularTable, names: list[str] | tuple[str, ...]) -> tuple[RectangularTable, list[str]]:
    """Remove the first column matching each name; return the table and the headers removed."""
    indexes = {}
    for name in names:
        idx = _find_named_column(table.headers, name)
        if idx is None:
            logger.debug("Column %r not present; nothing to remove", name)
            continue
        indexes[idx] = table.headers[idx]

    if not indexes:
        return table, []

    keep = [i for i in range(len(table.headers)) if i not in indexes]
    headers = [table.headers[i] for i in keep]
    rows = _drop_blank_rows([[row[i] for i in keep] for row in table.rows], "Column removal")
    removed = [indexes[i] for i in sorted(indexes)]
    logger.info("Removed columns %s", removed)
    return RectangularTable(headers=headers, rows=rows), removed


# ─── Overview Normalization ──────────────────────────────────────────────────


def normalize_overview(table: RectangularTable) -> RectangularTable:
    """Collapse line breaks and whitespace runs in the overview column to single spaces."""
    idx, _ = find_column(table.headers, OVERVIEW_ALIASES)
    if idx is None:
        return table

    rows: list[list[str]] = []
    changed = 0
    for row in table.rows:
        collapsed = WHITESPACE_RUN_RE.sub(" ", row[idx]).strip()
        if collapsed != row[idx]:
            changed += 1
            row = list(row)
            row[idx] = collapsed
        rows.append(row)

    logger.info("Normalized %d cells in overview column %r", changed, table.headers[idx])
    return RectangularTable(headers=list(table.headers), rows=_drop_blank_rows(rows, "Overview normalization"))
