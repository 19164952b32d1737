import json
from pathlib import Path

from typer.testing import CliRunner

from stepviz.cli import app

EXAMPLE = str(Path(__file__).resolve().parent.parent / "examples" / "gfs-write-path.json")

runner = CliRunner()


def test_generate_prints_mermaid():
    result = runner.invoke(app, ["generate", EXAMPLE])
    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("sequenceDiagram")
    assert "participant secondary2" in result.stdout


def test_generate_with_scene_applies_its_overlays():
    result = runner.invoke(app, ["generate", EXAMPLE, "--scene", "s2"])
    assert result.exit_code == 0, result.output
    assert "participant secondary2" not in result.stdout
    assert "(retrying)" in result.stdout


def test_generate_single_step_and_bad_step():
    result = runner.invoke(app, ["generate", EXAMPLE, "--step", "0"])
    assert result.exit_code == 0, result.output
    assert "->>" not in result.stdout

    result = runner.invoke(app, ["generate", EXAMPLE, "--step", "99"])
    assert result.exit_code != 0


def test_steps_lists_every_step():
    result = runner.invoke(app, ["steps", EXAMPLE])
    assert result.exit_code == 0, result.output
    steps = json.loads(result.stdout)
    assert len(steps) == 12
    assert steps[0]["type"] == "initial"
    assert steps[-1]["caption"] == "Complete flow"


def test_validate_ok_and_failing(tmp_path):
    result = runner.invoke(app, ["validate", EXAMPLE])
    assert result.exit_code == 0, result.output
    assert "07-write-path: ok" in result.stdout

    bad = tmp_path / "bad.json"
    bad.write_text(
        json.dumps(
            {
                "title": "Bad",
                "nodes": [{"id": "m", "type": "coordinator"}, {"id": "c", "type": "client"}],
                "edges": [{"id": "e1", "from": "c", "to": "m", "kind": "data"}],
            }
        ),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["validate", str(bad)])
    assert result.exit_code == 1


def test_unloadable_spec_exits_2(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text('{"title": "x", "nodes": [], "edges": []}', encoding="utf-8")
    assert runner.invoke(app, ["steps", str(broken)]).exit_code == 2
    assert runner.invoke(app, ["steps", str(tmp_path / "missing.json")]).exit_code == 2


def test_diff_between_scenes():
    result = runner.invoke(app, ["diff", EXAMPLE, "s1", "s2"])
    assert result.exit_code == 0, result.output
    diff = json.loads(result.stdout)
    assert diff["remove"]["nodeIds"] == ["secondary2"]
    assert "e5" in diff["remove"]["edgeIds"]
    assert "secondary1" in [n["id"] for n in diff["modify"]["nodes"]]


def test_render_writes_svg_per_step(tmp_path):
    result = runner.invoke(app, ["render", EXAMPLE, "--renderer", "fake", "--output-dir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    summary = json.loads(result.stdout)
    assert len(summary) == 12
    assert all(item["ok"] for item in summary)
    assert len(list(tmp_path.glob("*.svg"))) == 12
    assert (tmp_path / "07-write-path-00-initial.mmd").exists()
    # the complete flow has the same shape as the last edge step
    assert summary[-1]["cached"] is True


def test_render_with_content_fingerprint_renders_final_step(tmp_path):
    result = runner.invoke(
        app,
        ["render", EXAMPLE, "--renderer", "fake", "--fingerprint", "content", "--output-dir", str(tmp_path)],
    )
    assert result.exit_code == 0, result.output
    summary = json.loads(result.stdout)
    assert summary[-1]["cached"] is False


def test_render_rejects_unknown_renderer(tmp_path):
    result = runner.invoke(app, ["render", EXAMPLE, "--renderer", "graphviz", "--output-dir", str(tmp_path)])
    assert result.exit_code != 0
