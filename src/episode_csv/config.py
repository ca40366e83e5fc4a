"""Shared configuration for the episode export processor.

Values are read from the environment (optionally via a ``.env`` file at the
project root) once, at import time.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")

# Cap on per-row cell parse errors returned to callers
MAX_CELL_ERRORS = int(os.getenv("EPISODE_CSV_MAX_CELL_ERRORS", "10"))

# Share of mismatched rows above which the corrupted-export repair pass runs
REPAIR_THRESHOLD = float(os.getenv("EPISODE_CSV_REPAIR_THRESHOLD", "0.5"))

# Physical lines an over-long accumulator may absorb before it is emitted as-is
MAX_MERGE_LINES = int(os.getenv("EPISODE_CSV_MAX_MERGE_LINES", "20"))

LOG_LEVEL = os.getenv("EPISODE_CSV_LOG_LEVEL", "INFO")

# Platforms whose exports number episodes one behind the app's own numbering
PLATFORM_EPISODE_OFFSETS = {
    "youku.com": -1,
}


def platform_offset(platform_url: str | None) -> int:
    """Return the episode-number offset for a platform URL (0 when unknown)."""
    if not platform_url:
        return 0
    for domain, offset in PLATFORM_EPISODE_OFFSETS.items():
        if domain in platform_url:
            return offset
    return 0
