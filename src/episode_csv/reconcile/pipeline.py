"""End-to-end processing of an episode export held in memory.

Pipeline position: the caller reads the export text, calls one of the entry
points below, and writes ``output_text`` back.  No step performs I/O.

  raw text -> tokenize -> (repair, if most rows are malformed) -> validate
           -> resolve columns -> transforms -> reconcile -> serialize

Only a missing episode-number column stops processing; it is reported as a
failed outcome, distinct from a successful run that matched nothing.  All
other problems end up in ``diagnostics``.
"""

import logging

from pydantic import BaseModel, Field

from episode_csv.config import platform_offset
from episode_csv.parsing.patterns import EPISODE_ALIASES
from episode_csv.parsing.repair import needs_repair, repair
from episode_csv.parsing.schema import Diagnostic, DiagnosticKind, RectangularTable
from episode_csv.parsing.serializer import serialize
from episode_csv.parsing.tokenizer import scan, to_table
from episode_csv.parsing.validation import count_mismatches, validate
from episode_csv.reconcile import transforms
from episode_csv.reconcile.columns import ColumnResolutionError, require_episode_column, resolve
from episode_csv.reconcile.reconciler import cell_failure_diagnostics, list_episodes, reconcile
from episode_csv.reconcile.schema import ColumnResolution, EpisodeInventory, ReconciliationRequest, ReconciliationResult
from episode_csv.reconcile.transforms import TitleCleanup

logger = logging.getLogger(__name__)


class ParsedExport(BaseModel):
    table: RectangularTable
    repaired: bool = False
    diagnostics: list[Diagnostic] = Field(default_factory=list)


class ProcessOptions(BaseModel):
    """Caller switches for process_export."""

    item_title: str | None = None
    clean_titles: bool = True
    remove_columns: list[str] = Field(default_factory=list)
    normalize_overview: bool = False
    dry_run: bool = False


class ProcessOutcome(BaseModel):
    """Tagged result: ok=True with a result, or ok=False with the column error."""

    ok: bool
    error: str | None = None
    headers: list[str] = Field(default_factory=list)
    searched_aliases: list[str] = Field(default_factory=list)
    columns: ColumnResolution | None = None
    result: ReconciliationResult | None = None
    output_text: str | None = None
    original_row_count: int = 0
    removed_columns: list[str] = Field(default_factory=list)
    title_cleanups: list[TitleCleanup] = Field(default_factory=list)
    repaired: bool = False
    diagnostics: list[Diagnostic] = Field(default_factory=list)


class AnalysisOutcome(BaseModel):
    ok: bool
    error: str | None = None
    headers: list[str] = Field(default_factory=list)
    searched_aliases: list[str] = Field(default_factory=list)
    episode_column_index: int | None = None
    episode_column_name: str | None = None
    data_rows: int = 0
    inventory: EpisodeInventory | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)


# ─── Parsing ─────────────────────────────────────────────────────────────────


def parse_export(text: str) -> ParsedExport:
    """Tokenize *text*, run the repair pass if the shape is globally wrong, then validate."""
    diagnostics: list[Diagnostic] = []

    scanned = scan(text)
    if scanned.unterminated_quote:
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.PARSE_AMBIGUITY,
                message="Unterminated quote at end of input was closed implicitly",
            )
        )
    table = to_table(scanned.records)

    repaired = False
    if needs_repair(table):
        mismatched = count_mismatches(table)
        logger.warning(
            "%d of %d rows do not match the %d-column header; running line repair",
            mismatched,
            len(table.rows),
            table.width,
        )
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.GLOBAL_SHAPE_CORRUPTION,
                message=f"{mismatched} of {len(table.rows)} rows mismatched the header; rows were re-merged from physical lines",
            )
        )
        table = repair(text).table
        repaired = True

    report = validate(table)
    diagnostics.extend(report.diagnostics())
    logger.info("Parsed export: %d columns, %d rows, %d diagnostics", report.table.width, len(report.table.rows), len(diagnostics))
    return ParsedExport(table=report.table, repaired=repaired, diagnostics=diagnostics)


# ─── Entry Points ────────────────────────────────────────────────────────────


def request_for_platform(
    episode_numbers: list[int], platform_url: str | None = None, **kwargs
) -> ReconciliationRequest:
    """Build a ReconciliationRequest with the platform's episode offset applied."""
    offset = platform_offset(platform_url)
    if offset:
        logger.info("Platform %s: shifting episode numbers by %d", platform_url, offset)
    return ReconciliationRequest(episode_numbers=episode_numbers, episode_offset=offset, **kwargs)


def process_export(text: str, request: ReconciliationRequest, options: ProcessOptions | None = None) -> ProcessOutcome:
    """Parse, clean and reconcile an export, returning the text to write back."""
    options = options or ProcessOptions()
    parsed = parse_export(text)
    table = parsed.table
    diagnostics = list(parsed.diagnostics)

    columns = resolve(table.headers)
    try:
        episode_idx = require_episode_column(columns, table.headers)
    except ColumnResolutionError as exc:
        logger.error("%s", exc)
        return ProcessOutcome(
            ok=False,
            error=str(exc),
            headers=exc.headers,
            searched_aliases=exc.searched_aliases,
            columns=columns,
            original_row_count=len(table.rows),
            repaired=parsed.repaired,
            diagnostics=diagnostics,
        )

    title_cleanups: list[TitleCleanup] = []
    if options.clean_titles and options.item_title and columns.name_column_index is not None:
        table, title_cleanups = transforms.clean_title_cells(table, columns.name_column_index, options.item_title)

    result = reconcile(table, episode_idx, request.target_episode_numbers(), request.mode)
    diagnostics.extend(cell_failure_diagnostics(result.cell_errors))

    # Column removal and overview clean-up only affect the written output
    output_table = result.remaining
    removed_columns: list[str] = []
    if options.remove_columns:
        output_table, removed_columns = transforms.drop_columns(output_table, options.remove_columns)
    if options.normalize_overview:
        output_table = transforms.normalize_overview(output_table)

    output_text = None if options.dry_run else serialize(output_table)
    if options.dry_run:
        logger.info("Dry run: would remove %d rows %s", result.removed_count, sorted(result.removed_episode_numbers))

    return ProcessOutcome(
        ok=True,
        headers=list(parsed.table.headers),
        columns=columns,
        result=result,
        output_text=output_text,
        original_row_count=len(parsed.table.rows),
        removed_columns=removed_columns,
        title_cleanups=title_cleanups,
        repaired=parsed.repaired,
        diagnostics=diagnostics,
    )


def analyze_export(text: str) -> AnalysisOutcome:
    """Report which episode numbers an export still contains."""
    parsed = parse_export(text)
    table = parsed.table
    columns = resolve(table.headers)
    if columns.episode_column_index is None:
        exc = ColumnResolutionError(table.headers)
        logger.error("%s", exc)
        return AnalysisOutcome(
            ok=False,
            error=str(exc),
            headers=exc.headers,
            searched_aliases=list(EPISODE_ALIASES),
            data_rows=len(table.rows),
            diagnostics=parsed.diagnostics,
        )

    inventory = list_episodes(table, columns.episode_column_index)
    return AnalysisOutcome(
        ok=True,
        headers=list(table.headers),
        episode_column_index=columns.episode_column_index,
        episode_column_name=table.headers[columns.episode_column_index],
        data_rows=len(table.rows),
        inventory=inventory,
        diagnostics=parsed.diagnostics + cell_failure_diagnostics(inventory.parse_errors),
    )
