"""Lifecycle hooks for Cadence.

Hooks are shell commands listed per hook point in ``hooks.yaml`` at the
workspace root. They are how reminders and state changes leave the process:
a desktop notifier, a chat webhook, a log shipper. Each command receives the
event payload as JSON on stdin and the hook point in ``CADENCE_HOOK_POINT``.

    on_reminder:
      - notify-send "Cadence" "$(jq -r .title)"
      - command: ./scripts/post-to-chat.sh
        timeout: 5

Hook points:
- on_habit_created, on_habit_updated, on_habit_archived
- on_habit_complete, on_habit_postponed
- on_timer_start, on_timer_stop
- on_reminder
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from cadence.fileio import read_yaml
from cadence.workspace import hooks_config_path, workspace_root

logger = logging.getLogger(__name__)

VALID_HOOK_POINTS = {
    "on_habit_created",
    "on_habit_updated",
    "on_habit_archived",
    "on_habit_complete",
    "on_habit_postponed",
    "on_timer_start",
    "on_timer_stop",
    "on_reminder",
}

DEFAULT_TIMEOUT = 30
OUTPUT_LIMIT = 4096


@dataclass
class Hook:
    command: str
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def parse(cls, entry: Any) -> Hook | None:
        """A hook is either a bare command string or {command, timeout}."""
        if isinstance(entry, str):
            return cls(command=entry) if entry.strip() else None
        if isinstance(entry, dict) and entry.get("command"):
            try:
                timeout = float(entry.get("timeout", DEFAULT_TIMEOUT))
            except (TypeError, ValueError):
                timeout = DEFAULT_TIMEOUT
            return cls(command=str(entry["command"]), timeout=timeout)
        return None


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    """Raw hooks.yaml mapping, or {} when the file is absent or unreadable."""
    if root is None:
        root = workspace_root()
    path = hooks_config_path(root)
    try:
        return read_yaml(path)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed %s: %s", path, e)
        return {}


def hooks_for(hook_point: str, root: Path | None = None) -> list[Hook]:
    entries = load_hooks_config(root).get(hook_point) or []
    if not isinstance(entries, list):
        logger.warning("hooks.yaml: %s should be a list of commands", hook_point)
        return []
    hooks = []
    for entry in entries:
        hook = Hook.parse(entry)
        if hook is None:
            logger.warning("hooks.yaml: ignoring malformed %s entry %r", hook_point, entry)
            continue
        hooks.append(hook)
    return hooks


def _run_one(hook: Hook, hook_point: str, payload: str, root: Path) -> dict[str, Any]:
    result: dict[str, Any] = {"command": hook.command, "hook_point": hook_point}
    env = dict(os.environ, CADENCE_HOOK_POINT=hook_point, CADENCE_ROOT=str(root))
    try:
        proc = subprocess.run(
            hook.command,
            shell=True,
            input=payload,
            capture_output=True,
            text=True,
            timeout=hook.timeout,
            cwd=str(root),
            env=env,
        )
    except subprocess.TimeoutExpired:
        result["exit_code"] = -1
        result["error"] = f"Hook timed out after {hook.timeout:g}s"
        logger.warning("Hook %r (%s) timed out after %gs", hook.command, hook_point, hook.timeout)
        return result
    except OSError as e:
        result["exit_code"] = -1
        result["error"] = str(e)
        logger.warning("Hook %r (%s) failed: %s", hook.command, hook_point, e)
        return result

    result["exit_code"] = proc.returncode
    result["stdout"] = proc.stdout[:OUTPUT_LIMIT]
    result["stderr"] = proc.stderr[:OUTPUT_LIMIT]
    if proc.returncode != 0:
        logger.warning("Hook %r (%s) exited with %s", hook.command, hook_point, proc.returncode)
    return result


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run every hook registered for *hook_point*, in order.

    Returns one result per hook with exit_code and captured stdout/stderr
    (or an error message). Hook failures are logged and reported in the
    results; they never raise into the caller.
    """
    if hook_point not in VALID_HOOK_POINTS:
        logger.debug("Ignoring unknown hook point %s", hook_point)
        return []
    if root is None:
        root = workspace_root()

    hooks = hooks_for(hook_point, root)
    if not hooks:
        return []

    payload = json.dumps(context, ensure_ascii=False)
    return [_run_one(hook, hook_point, payload, root) for hook in hooks]
