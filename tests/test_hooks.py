"""Tests for cadence/hooks.py — hook system."""

import json

import yaml

from cadence.hooks import Hook, hooks_for, load_hooks_config, run_hooks


def _write_hooks(workspace, config):
    (workspace / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(workspace):
    """No hooks.yaml -> no hooks run."""
    assert load_hooks_config(workspace) == {}
    results = run_hooks("on_habit_complete", {"habitId": "h1"}, workspace)
    assert results == []


def test_run_hooks_with_echo(workspace):
    """Hook that echoes context via stdin."""
    _write_hooks(workspace, {"on_habit_complete": ["cat"]})

    results = run_hooks("on_habit_complete", {"habitId": "h1"}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    output = json.loads(results[0]["stdout"])
    assert output["habitId"] == "h1"


def test_run_hooks_only_matching_point(workspace):
    _write_hooks(workspace, {"on_timer_start": ["cat"]})
    assert run_hooks("on_timer_stop", {}, workspace) == []


def test_run_hooks_invalid_hook_point(workspace):
    _write_hooks(workspace, {"on_unknown": ["cat"]})
    results = run_hooks("on_unknown", {}, workspace)
    assert results == []


def test_run_hooks_failure_is_reported(workspace):
    _write_hooks(workspace, {"on_reminder": ["exit 3"]})
    results = run_hooks("on_reminder", {}, workspace)
    assert results[0]["exit_code"] == 3


def test_run_hooks_timeout(workspace):
    """Hook timeout protection."""
    _write_hooks(workspace, {"on_reminder": [{"command": "sleep 10", "timeout": 1}]})

    results = run_hooks("on_reminder", {"habitId": "h1"}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_hook_sees_point_in_environment(workspace):
    _write_hooks(workspace, {"on_timer_start": ["echo $CADENCE_HOOK_POINT"]})
    results = run_hooks("on_timer_start", {}, workspace)
    assert results[0]["stdout"].strip() == "on_timer_start"


def test_malformed_entries_are_skipped(workspace):
    _write_hooks(workspace, {"on_habit_created": ["", 42, {"timeout": 3}, "cat"]})
    hooks = hooks_for("on_habit_created", workspace)
    assert hooks == [Hook(command="cat")]


def test_non_list_hook_point_is_ignored(workspace):
    _write_hooks(workspace, {"on_habit_created": "cat"})
    assert run_hooks("on_habit_created", {}, workspace) == []


def test_malformed_hooks_yaml_runs_nothing(workspace):
    (workspace / "hooks.yaml").write_text("on_reminder: [cat\n", encoding="utf-8")
    assert load_hooks_config(workspace) == {}
    assert run_hooks("on_reminder", {"habitId": "h1"}, workspace) == []
