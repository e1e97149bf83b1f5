# tests/unit/test_cli.py
import json

import pytest
from typer.testing import CliRunner

from apps.recorder_cli import app
from data_collection.event_writer import iter_jsonl

runner = CliRunner()


@pytest.fixture
def workspace(monkeypatch, tmp_path):
    monkeypatch.setenv("GESTUREDECK_DATA_ROOT", str(tmp_path / "data"))
    monkeypatch.setenv("GESTUREDECK_LOGS_ROOT", str(tmp_path / "logs"))
    return tmp_path


@pytest.fixture
def cli(workspace):
    store = workspace / "store.json"

    def _invoke(*args, input=None):
        return runner.invoke(app, ["--store", str(store), *args], input=input)

    return _invoke


@pytest.fixture
def events_file(workspace):
    path = workspace / "capture.jsonl"
    lines = [
        {"time": 10, "type": "touchpad:update", "payload": {"parameter": "rot4dXW", "normalized": 0.5}},
        {"time": 0, "type": "touchpad:update", "payload": {"parameter": "rot4dXW", "normalized": 0.1}},
        {"time": 5, "type": "hardware:midi-value", "payload": {"parameter": "gridDensity", "value": 4}},
    ]
    text = "\n".join(json.dumps(line) for line in lines) + "\n{not json}\n\n"
    path.write_text(text, encoding="utf-8")
    return path


def _record(cli, events_file, name="Sweep"):
    result = cli("record", "--from", str(events_file), "--name", name)
    assert result.exit_code == 0, result.output
    return result.output.split()[0]


def test_record_from_jsonl(cli, events_file):
    take_id = _record(cli, events_file)
    assert take_id.startswith("take-")

    shown = cli("show", take_id)
    assert shown.exit_code == 0
    document = json.loads(shown.output)
    assert document["name"] == "Sweep"
    assert [e["time"] for e in document["events"]] == [0, 5, 10]
    assert document["duration"] == 10
    assert document["sources"] == ["touchpad:update", "hardware:midi-value"]


def test_list_marks_selection(cli, events_file):
    assert cli("list").output.strip() == "No gestures recorded"
    take_id = _record(cli, events_file)
    output = cli("list").output
    assert f"* {take_id}  Sweep" in output
    assert "Touch Pad + MIDI" in output


def test_rename_duplicate_delete(cli, events_file):
    take_id = _record(cli, events_file)

    renamed = cli("rename", take_id, "Swirl")
    assert renamed.exit_code == 0
    assert "Renamed to Swirl" in renamed.output
    assert cli("rename", take_id, "   ").exit_code == 1

    dup = cli("duplicate", take_id)
    assert dup.exit_code == 0
    assert "Swirl (copy)" in dup.output

    assert cli("delete", take_id).exit_code == 0
    assert cli("delete", take_id).exit_code == 1
    assert "Swirl (copy)" in cli("list").output


def test_show_unknown_id_fails(cli):
    result = cli("show", "take-missing")
    assert result.exit_code == 1
    assert "No gesture" in result.output


def test_export_and_import(cli, events_file, workspace):
    assert cli("export", str(workspace / "out")).exit_code == 1

    _record(cli, events_file)
    out_dir = workspace / "out"
    out_dir.mkdir()
    exported = cli("export", str(out_dir))
    assert exported.exit_code == 0
    target = out_dir / "vib34d-gesture-library.json"
    assert target.is_file()

    assert cli("clear", "--yes").exit_code == 0
    assert "No gestures recorded" in cli("list").output

    imported = cli("import", str(target))
    assert imported.exit_code == 0
    assert "Imported 1 gestures" in imported.output

    bad = workspace / "bad.json"
    bad.write_text('{"foo": 1}', encoding="utf-8")
    assert cli("import", str(bad)).exit_code == 1


def test_export_defaults_to_exports_folder(cli, events_file, workspace):
    _record(cli, events_file)
    result = cli("export")
    assert result.exit_code == 0
    assert (workspace / "data" / "exports" / "vib34d-gesture-library.json").is_file()


def test_clear_asks_for_confirmation(cli, events_file):
    _record(cli, events_file)
    assert cli("clear", input="n\n").exit_code == 1
    assert "Sweep" in cli("list").output


def test_play_runs_to_completion(cli, events_file, workspace):
    params = workspace / "params.json"
    params.write_text(json.dumps({"rot4dXW": {"min": 0, "max": 10}, "gridDensity": {"min": 0, "max": 9, "type": "int"}}))
    log = workspace / "playback.jsonl"
    take_id = _record(cli, events_file)

    result = runner.invoke(
        app,
        ["--store", str(workspace / "store.json"), "--parameters", str(params), "play", take_id, "--log", str(log)],
    )
    assert result.exit_code == 0, result.output
    assert "Playback finished" in result.output

    logged = list(iter_jsonl(log))
    assert [entry["event"]["time"] for entry in logged] == [0, 5, 10]
    assert all(entry["recordingId"] == take_id for entry in logged)


def test_play_unknown_take_fails(cli):
    result = cli("play", "take-missing")
    assert result.exit_code == 1
