"""Pydantic models for column resolution and episode-set reconciliation."""

from enum import Enum

from pydantic import BaseModel, Field

from episode_csv.parsing.schema import RectangularTable


class ColumnRole(str, Enum):
    EPISODE_NUMBER = "episode_number"
    TITLE = "title"
    UNRESOLVED = "unresolved"


class ReconcileMode(str, Enum):
    DELETE = "delete"  # drop rows whose episode is in the target set
    KEEP = "keep"  # drop rows whose episode is not in the target set


class ColumnResolution(BaseModel):
    """Indices of the semantic columns in a header row (None = not found)."""

    episode_column_index: int | None = None
    name_column_index: int | None = None
    matched_episode_alias: str | None = None
    matched_name_alias: str | None = None


class ReconciliationRequest(BaseModel):
    """Episode numbers to reconcile against, as sent by the caller.

    ``episode_offset`` shifts every number before matching (some platforms
    number their exports one behind); shifted numbers below 1 are dropped.
    """

    episode_numbers: list[int]
    mode: ReconcileMode = ReconcileMode.DELETE
    episode_offset: int = 0

    def target_episode_numbers(self) -> set[int]:
        if not self.episode_offset:
            return set(self.episode_numbers)
        shifted = (n + self.episode_offset for n in self.episode_numbers)
        return {n for n in shifted if n > 0}


class CellParseFailure(BaseModel):
    """An episode cell that is not an integer."""

    row_index: int
    value: str
    error: str

    @property
    def line(self) -> int:
        return self.row_index + 2


class ReconciliationResponse(BaseModel):
    remaining_row_count: int
    removed_count: int
    removed_episode_numbers: list[int]


class ReconciliationResult(BaseModel):
    """Rows left after filtering, with what was removed and why some rows were skipped."""

    remaining: RectangularTable
    removed_count: int
    removed_episode_numbers: list[int]
    cell_errors: list[CellParseFailure] = Field(default_factory=list)
    cell_error_count: int = 0

    @property
    def remaining_row_count(self) -> int:
        return len(self.remaining.rows)

    def to_response(self) -> ReconciliationResponse:
        return ReconciliationResponse(
            remaining_row_count=self.remaining_row_count,
            removed_count=self.removed_count,
            removed_episode_numbers=sorted(self.removed_episode_numbers),
        )


class EpisodeInventory(BaseModel):
    """Episode numbers present in an export, for deciding what is still to import."""

    episodes: list[int]
    parse_errors: list[CellParseFailure] = Field(default_factory=list)
    parse_error_count: int = 0

    @property
    def count(self) -> int:
        return len(self.episodes)

    @property
    def lowest(self) -> int | None:
        return self.episodes[0] if self.episodes else None

    @property
    def highest(self) -> int | None:
        return self.episodes[-1] if self.episodes else None
