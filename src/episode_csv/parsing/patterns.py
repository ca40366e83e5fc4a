"""Compiled regex patterns and constant tuples for episode export parsing.

These identify structural elements of a scraped episode export: the start of
a data row inside a corrupted line run, integer episode cells, and the header
aliases used to find the episode-number and title columns.  Used by
repair.py, columns.py and reconciler.py.
"""

import re

# ─── Delimited Text ───────────────────────────────────────────────────────────

DELIMITER = ","
QUOTE = '"'
LINE_TERMINATOR = "\n"
BOM = "\ufeff"

# Characters that force a field to be quoted on output
SPECIAL_CHARS = (DELIMITER, QUOTE, "\n", "\r")

# Physical line break, regardless of quoting
PHYSICAL_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")


# ─── Row Anchor ───────────────────────────────────────────────────────────────

# Start of a data row inside a space-joined run of physical lines, e.g.
# " 12,Some Title,2024-03-01,".  Shape: integer, name (plain or quoted),
# date-like token.  Must follow whitespace, which is where a physical line
# break was replaced during merging.
ROW_ANCHOR_RE = re.compile(
    r"(?<=\s)"
    r"\d+,\s*"
    r'(?:"(?:[^"]|"")*"|[^,]+),\s*'
    r"\d{4}[-/.]\d{1,2}[-/.]\d{1,2}\b"
)


# ─── Cell Patterns ───────────────────────────────────────────────────────────

# Integer episode cell ("12", "+3", "-1"); ASCII digits only
INTEGER_CELL_RE = re.compile(r"^[+-]?\d+$", re.ASCII)

# Runs of whitespace including line breaks, collapsed in overview cells
WHITESPACE_RUN_RE = re.compile(r"\s+")


# ─── Header Aliases ──────────────────────────────────────────────────────────

# Ordered: earlier aliases win over later ones, whatever the header order
EPISODE_ALIASES = (
    "episode_number",
    "episode",
    "ep",
    "number",
    "episode_num",
    "ep_num",
    "集数",
    "第几集",
)

NAME_ALIASES = (
    "name",
    "title",
    "标题",
    "名称",
    "剧集名",
)

# Long-text columns whose line breaks are collapsed on request
OVERVIEW_ALIASES = (
    "overview",
    "description",
    "描述",
    "简介",
)

# Columns the scraper emits that callers commonly strip before import
OPTIONAL_COLUMNS = (
    "air_date",
    "runtime",
    "backdrop",
)
