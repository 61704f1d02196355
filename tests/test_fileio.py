"""Tests for cadence/fileio.py."""

from cadence.fileio import lock_path, read_text, read_yaml, write_text_atomic, write_yaml_atomic


def test_read_missing_file(tmp_path):
    assert read_text(tmp_path / "nope.json") is None
    assert read_yaml(tmp_path / "nope.yaml") == {}


def test_atomic_write_replaces_and_leaves_no_temp_files(tmp_path):
    path = tmp_path / "data" / "habits.json"
    write_text_atomic(path, "[]\n")
    write_text_atomic(path, '[{"id": "a"}]\n')

    assert read_text(path) == '[{"id": "a"}]\n'
    leftovers = [p.name for p in path.parent.iterdir() if p.name.startswith(".tmp_")]
    assert leftovers == []
    assert lock_path(path).exists()


def test_yaml_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    write_yaml_atomic(path, {"default_postpone_minutes": 10})
    assert read_yaml(path) == {"default_postpone_minutes": 10}


def test_non_mapping_yaml_reads_empty(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert read_yaml(path) == {}
