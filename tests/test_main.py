import json

import pytest

from frames import make_pushup_frame, make_squat_frame
from form_coach.exercise_analysis.config_utils import load_squat_config
from form_coach.main import build_parser, main


@pytest.fixture
def squat_session(tmp_path):
    frames = [make_squat_frame(knee_angle=k, hip_y=y)
              for k, y in [(170, 0.5), (100, 0.6), (90, 0.7), (90, 0.68)]]
    lines = [json.dumps(frame) for frame in frames] + ["[]"]
    path = tmp_path / "squat.jsonl"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def test_parser_defaults():
    args = build_parser().parse_args(["--landmarks", "session.jsonl"])
    assert args.exercise == "squat"
    assert args.format == "text"
    assert args.config is None


def test_parser_rejects_unknown_exercise():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--landmarks", "x.jsonl", "--exercise", "lunge"])


def test_text_output(squat_session, capsys):
    assert main(["--landmarks", squat_session]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 5
    assert lines[0].split() == ["1", "standing", "OK"]
    assert lines[3].split()[:2] == ["4", "bottom"]
    assert lines[4].endswith("No landmarks detected")


def test_json_output(squat_session, capsys):
    assert main(["--landmarks", squat_session, "--format", "json"]) == 0
    records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [r["phase"] for r in records] == ["standing", "descending", "descending", "bottom", "bottom"]
    assert records[3]["evaluation"]["is_correct"] is True
    assert records[3]["evaluation"]["angles"]["left_knee"] == pytest.approx(90.0)
    assert "angles" not in records[4]["evaluation"]


def test_pushup_exercise(tmp_path, capsys):
    path = tmp_path / "pushup.jsonl"
    path.write_text(json.dumps(make_pushup_frame(elbow_angle=140)) + "\n", encoding="utf-8")
    assert main(["--exercise", "pushup", "--landmarks", str(path)]) == 0
    assert capsys.readouterr().out.split(None, 2)[2].strip() == "Arms not fully extended at top"


def test_custom_config(squat_session, tmp_path, capsys):
    config = load_squat_config()
    config["form_rules"]["max_knee_angle"] = 80
    config_path = tmp_path / "strict.json"
    config_path.write_text(json.dumps(config), encoding="utf-8")
    assert main(["--landmarks", squat_session, "--config", str(config_path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[3].endswith("Knees not bent enough")


def test_incomplete_config_returns_error(squat_session, tmp_path):
    config_path = tmp_path / "empty.json"
    config_path.write_text("{}", encoding="utf-8")
    assert main(["--landmarks", squat_session, "--config", str(config_path)]) == 1


def test_bad_landmark_file_returns_error(tmp_path):
    path = tmp_path / "broken.jsonl"
    path.write_text("{broken\n", encoding="utf-8")
    assert main(["--landmarks", str(path)]) == 1


def test_missing_landmark_file_returns_error(tmp_path):
    assert main(["--landmarks", str(tmp_path / "absent.jsonl")]) == 1
