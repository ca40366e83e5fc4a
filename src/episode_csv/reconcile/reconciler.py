"""Filter an export's rows against a set of episode numbers.

Matching is exact string equality between the trimmed episode cell and the
decimal form of each target number, so "01" does not match 1.  Cells that
are not integers never match in either mode: they always survive filtering
and are reported (up to a cap) as cell parse failures.  Row order is kept.
"""

import logging

from episode_csv.config import MAX_CELL_ERRORS
from episode_csv.parsing.patterns import INTEGER_CELL_RE
from episode_csv.parsing.schema import Diagnostic, DiagnosticKind, RectangularTable
from episode_csv.reconcile.schema import (
    CellParseFailure,
    EpisodeInventory,
    ReconcileMode,
    ReconciliationResult,
)

logger = logging.getLogger(__name__)


def parse_episode_cell(value: str) -> int | None:
    """Return the integer in an episode cell, or None if it is not an integer."""
    stripped = value.strip()
    if not INTEGER_CELL_RE.match(stripped):
        return None
    return int(stripped)


def _cell_failure(row_index: int, value: str) -> CellParseFailure:
    return CellParseFailure(row_index=row_index, value=value, error=f'Cannot parse episode number: "{value}"')


def cell_failure_diagnostics(failures: list[CellParseFailure]) -> list[Diagnostic]:
    return [
        Diagnostic(
            kind=DiagnosticKind.CELL_PARSE_FAILURE,
            message=f"Line {failure.line}: {failure.error}",
            row_index=failure.row_index,
            line=failure.line,
        )
        for failure in failures
    ]


def reconcile(
    table: RectangularTable,
    episode_column_index: int,
    target_episode_numbers: set[int],
    mode: ReconcileMode = ReconcileMode.DELETE,
    max_cell_errors: int = MAX_CELL_ERRORS,
) -> ReconciliationResult:
    """Drop rows that match (delete mode) or do not match (keep mode) the targets."""
    targets = {str(n) for n in target_episode_numbers}
    kept_rows: list[list[str]] = []
    removed: list[int] = []
    failures: list[CellParseFailure] = []
    failure_count = 0

    for i, row in enumerate(table.rows):
        cell = row[episode_column_index].strip()
        episode = parse_episode_cell(cell)

        if episode is None:
            failure_count += 1
            if len(failures) < max_cell_errors:
                failures.append(_cell_failure(i, cell))
            logger.debug("Line %d: non-integer episode cell %r kept", i + 2, cell)
            kept_rows.append(row)
            continue

        matched = cell in targets
        drop = matched if mode == ReconcileMode.DELETE else not matched
        if drop:
            removed.append(episode)
        else:
            kept_rows.append(row)

    removed.sort()
    logger.info(
        "Reconciled %d rows in %s mode: removed %d %s, %d non-integer cells",
        len(table.rows),
        mode.value,
        len(removed),
        removed,
        failure_count,
    )
    if failure_count:
        logger.warning("%d rows have a non-integer episode cell and were left untouched", failure_count)

    return ReconciliationResult(
        remaining=RectangularTable(headers=list(table.headers), rows=kept_rows),
        removed_count=len(removed),
        removed_episode_numbers=removed,
        cell_errors=failures,
        cell_error_count=failure_count,
    )


def list_episodes(
    table: RectangularTable, episode_column_index: int, max_cell_errors: int = MAX_CELL_ERRORS
) -> EpisodeInventory:
    """Collect the episode numbers present in *table*, ascending."""
    episodes: list[int] = []
    failures: list[CellParseFailure] = []
    failure_count = 0

    for i, row in enumerate(table.rows):
        cell = row[episode_column_index].strip()
        episode = parse_episode_cell(cell)
        if episode is None:
            failure_count += 1
            if len(failures) < max_cell_errors:
                failures.append(_cell_failure(i, cell))
            continue
        episodes.append(episode)

    episodes.sort()
    logger.info("Export lists %d episodes (%d unparseable cells)", len(episodes), failure_count)
    return EpisodeInventory(episodes=episodes, parse_errors=failures, parse_error_count=failure_count)
