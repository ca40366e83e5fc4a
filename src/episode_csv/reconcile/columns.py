"""Map raw header strings to semantic column roles via ordered alias lists.

Matching is substring containment on the trimmed, case-folded header, so a
header like "Episode Number (TMDB)" still resolves.  Alias-list order beats
header order: the first alias that matches any header wins, even if a later
alias would match an earlier header.  Containment can produce false positives
(a header "titleless_episode" contains both "title" and "episode"), so every
decision is logged.
"""

import logging

from episode_csv.parsing.patterns import EPISODE_ALIASES, NAME_ALIASES
from episode_csv.reconcile.schema import ColumnResolution, ColumnRole

logger = logging.getLogger(__name__)


class ColumnResolutionError(ValueError):
    """No header matched any episode-number alias; reconciliation cannot run."""

    def __init__(self, headers: list[str], searched_aliases: tuple[str, ...] = EPISODE_ALIASES):
        self.headers = list(headers)
        self.searched_aliases = list(searched_aliases)
        super().__init__(
            f"No episode-number column found. Searched aliases: {', '.join(self.searched_aliases)}; "
            f"headers found: {', '.join(self.headers) if self.headers else '(none)'}"
        )


def normalize_header(header: str) -> str:
    return header.strip().casefold()


def find_column(headers: list[str], aliases: tuple[str, ...]) -> tuple[int | None, str | None]:
    """Return (index, alias) of the first alias that any header contains, else (None, None)."""
    normalized = [normalize_header(h) for h in headers]
    for alias in aliases:
        needle = alias.casefold()
        for idx, header in enumerate(normalized):
            if needle in header:
                return idx, alias
    return None, None


def resolve(headers: list[str]) -> ColumnResolution:
    """Resolve the episode-number and name/title columns of a header row."""
    episode_idx, episode_alias = find_column(headers, EPISODE_ALIASES)
    name_idx, name_alias = find_column(headers, NAME_ALIASES)

    if episode_idx is None:
        logger.warning("No episode-number column among headers %s", headers)
    else:
        logger.info("Episode column: %r (index %d, alias %r)", headers[episode_idx], episode_idx, episode_alias)
    if name_idx is None:
        logger.info("No name/title column among headers %s", headers)
    else:
        logger.info("Name column: %r (index %d, alias %r)", headers[name_idx], name_idx, name_alias)

    return ColumnResolution(
        episode_column_index=episode_idx,
        name_column_index=name_idx,
        matched_episode_alias=episode_alias,
        matched_name_alias=name_alias,
    )


def classify_header(header: str) -> ColumnRole:
    """Role of a single header on its own; the episode-number aliases are tried first."""
    if find_column([header], EPISODE_ALIASES)[0] is not None:
        return ColumnRole.EPISODE_NUMBER
    if find_column([header], NAME_ALIASES)[0] is not None:
        return ColumnRole.TITLE
    return ColumnRole.UNRESOLVED


def require_episode_column(resolution: ColumnResolution, headers: list[str]) -> int:
    """Return the episode column index or raise ColumnResolutionError."""
    if resolution.episode_column_index is None:
        raise ColumnResolutionError(headers)
    return resolution.episode_column_index
