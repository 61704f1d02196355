"""File I/O for the Cadence workspace.

Collection files and config files are replaced atomically (temp file in the
same directory, fsync, rename). Readers and writers of one file coordinate
through an flock on a sibling ``.lock`` file, so the reminder job and the API
never observe a half-replaced collection.
"""

from __future__ import annotations

import fcntl
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import yaml


def lock_path(path: Path) -> Path:
    return path.with_name(f".{path.name}.lock")


@contextmanager
def file_lock(path: Path, exclusive: bool = True) -> Iterator[None]:
    """Hold an flock guarding *path* for the duration of the block."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path(path), "a", encoding="utf-8") as lock:
        fcntl.flock(lock.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
        try:
            yield
        finally:
            fcntl.flock(lock.fileno(), fcntl.LOCK_UN)


def read_text(path: Path) -> str | None:
    """Read a text file under a shared lock. None if it does not exist."""
    if not path.exists():
        return None
    with file_lock(path, exclusive=False):
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None


def write_text_atomic(path: Path, content: str) -> None:
    """Replace *path* with *content* under an exclusive lock."""
    with file_lock(path):
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=path.suffix)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping. Missing, empty or non-mapping files read as {}."""
    text = read_text(path)
    if not text or not text.strip():
        return {}
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else {}


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    content = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    write_text_atomic(path, content)
