"""
Backup storage for the lunch bot state.

The backup file holds exactly the JSON produced by `lb dumpstate`. It is
written wholesale on every backup and read once at startup.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path

from .engine import LunchBotEngine
from .models import StateDecodeError

logger = logging.getLogger(__name__)


def get_backup_path(path: Path) -> Path:
    """Get the backup path, creating its directory if needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


@contextmanager
def open_for_backup(path: Path):
    """Context manager yielding a temporary file that replaces `path` on success."""
    path = get_backup_path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    f = open(tmp_path, "w", encoding="utf-8")
    try:
        yield f
        f.close()
        os.replace(tmp_path, path)
    except Exception:
        f.close()
        tmp_path.unlink(missing_ok=True)
        raise


def backup_state(engine: LunchBotEngine, path: Path) -> None:
    """
    Write the current state to `path`.

    The state is serialized under the engine lock; the file is written
    after the lock is released.

    Raises:
        OSError: if the file cannot be written
    """
    payload = engine.serialize()
    with open_for_backup(path) as f:
        f.write(payload)
    logger.debug(f"State backed up to {path}")


def recover_state(engine: LunchBotEngine, path: Path) -> None:
    """
    Replace the engine state with the contents of a backup file.

    Raises:
        OSError: if the file cannot be read
        StateDecodeError: if the file does not contain a valid state
    """
    try:
        payload = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise StateDecodeError(f"backup file is not valid UTF-8: {e}") from e
    engine.restore(payload)
    logger.info(f"State recovered from {path}")
