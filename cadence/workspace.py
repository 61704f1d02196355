"""Workspace root and path helpers for Cadence."""

from __future__ import annotations

import os
from pathlib import Path


def workspace_root() -> Path:
    """Get the workspace root directory (contains data/, config.yaml, hooks.yaml)."""
    return Path(
        os.environ.get("CADENCE_ROOT", str(Path.home() / ".cadence"))
    ).expanduser().resolve()


# ── Path helpers ──────────────────────────────────────────────

def data_dir(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data"


def collection_path(key: str, root: Path | None = None) -> Path:
    return data_dir(root) / f"{key}.json"


def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "hooks.yaml"
