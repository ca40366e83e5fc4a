"""Filesystem adapter for the CLI: read an export, write it back safely.

The parsing and reconcile packages never touch the filesystem; callers hand
them text and write the returned text back through these helpers.  There is
no locking here: two processes rewriting the same export concurrently can
lose one writer's changes.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def load_text(path: Path | str) -> str:
    """Read an export as UTF-8 text (a BOM, if any, is left for the tokenizer)."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Export file not found: {path}")
    with open(path, "r", encoding="utf-8", newline="") as fopen:
        text = fopen.read()
    logger.info("Read %d characters from %s", len(text), path)
    return text


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + ".bak")


def save_text(path: Path | str, text: str, backup: bool = True) -> Path | None:
    """Atomically replace *path* with *text*, optionally keeping a .bak copy first.

    Returns the backup path when one was written.
    """
    path = Path(path)
    if not path.parent.is_dir():
        raise FileNotFoundError(f"Target directory does not exist: {path.parent}")

    backup_file = None
    if backup and path.exists():
        backup_file = backup_path(path)
        shutil.copy2(path, backup_file)
        logger.info("Backed up %s to %s", path, backup_file)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fopen:
            fopen.write(text)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote %d characters to %s", len(text), path)
    return backup_file
