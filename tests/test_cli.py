"""Tests for the command-line interface."""

import json

import pytest

from autolayout.cli import main

DIAGRAM = {
    "nodes": [{"id": "A", "label": "Start"}, {"id": "B"}],
    "edges": [{"from": "A", "to": "B"}],
}


@pytest.fixture
def diagram_file(tmp_path):
    path = tmp_path / "diagram.json"
    path.write_text(json.dumps(DIAGRAM), encoding="utf-8")
    return path


def run(capsys, *argv):
    code = main(list(argv))
    return code, json.loads(capsys.readouterr().out)


class TestLayoutCommand:

    def test_layout_to_stdout(self, capsys, diagram_file):
        code, out = run(capsys, "layout", str(diagram_file), "--now", "7")
        assert code == 0
        assert [el["id"] for el in out] == ["A", "A-label", "B", "A->B"]
        assert out[0]["seed"] == 7

    def test_layout_is_repeatable_with_fixed_now(self, capsys, diagram_file):
        _, first = run(capsys, "layout", str(diagram_file), "--now", "7")
        _, second = run(capsys, "layout", str(diagram_file), "--now", "7")
        assert first == second

    def test_scene(self, capsys, diagram_file):
        code, out = run(capsys, "layout", str(diagram_file), "--scene")
        assert code == 0
        assert out["type"] == "excalidraw"
        assert len(out["elements"]) == 4

    def test_output_file(self, capsys, diagram_file, tmp_path):
        target = tmp_path / "out.json"
        code, out = run(capsys, "layout", str(diagram_file), "-o", str(target), "--now", "1")
        assert code == 0
        assert out == {"status": "ok", "written": str(target)}
        written = json.loads(target.read_text(encoding="utf-8"))
        assert written[0]["id"] == "A"

    def test_stdin(self, capsys, monkeypatch):
        import io
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(DIAGRAM)))
        code, out = run(capsys, "layout", "-")
        assert code == 0
        assert len(out) == 4

    def test_missing_file(self, capsys, tmp_path):
        code, out = run(capsys, "layout", str(tmp_path / "nope.json"))
        assert code == 2
        assert out["status"] == "error"
        assert "not found" in out["error"]

    def test_invalid_json(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{nodes", encoding="utf-8")
        code, out = run(capsys, "layout", str(path))
        assert code == 1
        assert "invalid JSON" in out["error"]

    def test_invalid_diagram(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"nodes": [{"id": ""}]}), encoding="utf-8")
        code, out = run(capsys, "layout", str(path))
        assert code == 1
        assert "invalid diagram" in out["error"]

    def test_non_object(self, capsys, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        code, out = run(capsys, "layout", str(path))
        assert code == 1
        assert "JSON object" in out["error"]


class TestParseCommand:

    def test_parse(self, capsys, tmp_path):
        path = tmp_path / "response.json"
        path.write_text(json.dumps({
            "nodes": [{"id": "x", "type": "diamond", "x": 0, "y": 0, "w": 80, "h": 80, "text": "?"}],
            "edges": [],
        }), encoding="utf-8")
        code, out = run(capsys, "parse", str(path), "--now", "3")
        assert code == 0
        assert [el["type"] for el in out] == ["diamond", "text"]

    def test_parse_bad_response(self, capsys, tmp_path):
        path = tmp_path / "response.txt"
        path.write_text("Here is the diagram you asked for", encoding="utf-8")
        code, out = run(capsys, "parse", str(path))
        assert code == 1
        assert out["error"].startswith("E_JSON:")

    def test_parse_schema_error(self, capsys, tmp_path):
        path = tmp_path / "response.json"
        path.write_text(json.dumps({"nodes": [{"id": "x"}]}), encoding="utf-8")
        code, out = run(capsys, "parse", str(path))
        assert code == 1
        assert out["error"].startswith("E_SCHEMA:")


class TestInspectionCommands:

    def test_validate(self, capsys, tmp_path):
        path = tmp_path / "diagram.json"
        path.write_text(json.dumps({
            "nodes": [{"id": "A"}, {"id": "A"}],
            "edges": [],
        }), encoding="utf-8")
        code, out = run(capsys, "validate", str(path))
        assert code == 0
        assert out["status"] == "ok"
        assert out["summary"]["valid"] is False
        assert out["issues"][0]["type"] == "error"

    def test_summary(self, capsys, diagram_file):
        code, out = run(capsys, "summary", str(diagram_file))
        assert code == 0
        assert out["summary"]["total_nodes"] == 2
        assert out["summary"]["layer_count"] == 2
