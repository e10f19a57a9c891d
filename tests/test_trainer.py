import pytest

from frames import make_pushup_frame, make_squat_frame
from form_coach.exercise_analysis import (
    EXERCISE_ANALYZER_REGISTRY,
    PushupAnalyzer,
    SquatAnalyzer,
    SquatPhase,
    get_exercise_analyzer,
)
from form_coach.feedback import CoachFeedback
from form_coach.trainer import FormTrainer


def test_registry_holds_both_exercises():
    assert EXERCISE_ANALYZER_REGISTRY["squat"] is SquatAnalyzer
    assert EXERCISE_ANALYZER_REGISTRY["pushup"] is PushupAnalyzer
    assert isinstance(get_exercise_analyzer("pushup"), PushupAnalyzer)


def test_unknown_exercise_rejected():
    with pytest.raises(ValueError, match="Unsupported exercise type: lunge"):
        FormTrainer("lunge")


def test_squat_session():
    trainer = FormTrainer("squat")
    frames = [make_squat_frame(knee_angle=k, hip_y=y)
              for k, y in [(170, 0.5), (100, 0.6), (90, 0.7), (90, 0.68), (100, 0.6), (170, 0.5)]]
    results = trainer.run(frames)

    assert [r["phase"] for r in results] == ["standing", "descending", "descending", "bottom", "ascending", "standing"]
    assert [r["phase_changed"] for r in results] == [False, True, False, True, True, True]
    assert [r["frame"] for r in results] == [1, 2, 3, 4, 5, 6]
    assert results[3]["exercise"] == "squat"
    assert results[3]["phase_description"].startswith("Lower until thighs")
    assert results[3]["evaluation"].angles["left_knee"] == pytest.approx(90.0)
    assert trainer.state.phase == SquatPhase.STANDING


def test_pushup_session_uses_top_rest_phase():
    trainer = FormTrainer("pushup")
    result = trainer.process_frame(make_pushup_frame(elbow_angle=165))
    assert result["phase"] == "top"
    assert result["evaluation"].is_correct
    assert trainer.exercise_name == "pushup"


def test_frame_buffer_keeps_recent_results():
    trainer = FormTrainer("squat")
    frame = make_squat_frame(knee_angle=170)
    for _ in range(40):
        trainer.process_frame(frame)
    assert len(trainer.frame_buffer) == 30
    assert trainer.frame_buffer[0]["frame"] == 11
    assert trainer.frame_count == 40


def test_missing_landmarks_warning(caplog):
    trainer = FormTrainer("squat", missing_landmarks_threshold=5)
    for _ in range(4):
        result = trainer.process_frame([])
    assert list(result["evaluation"].issues) == ["No landmarks detected"]
    assert trainer.is_body_visible()
    assert "can't see your full body" not in caplog.text

    trainer.process_frame([])
    assert not trainer.is_body_visible()
    assert "can't see your full body" in caplog.text


def test_visible_frame_resets_missing_counter():
    trainer = FormTrainer("squat", missing_landmarks_threshold=3)
    trainer.process_frame(None)
    trainer.process_frame(None)
    trainer.process_frame(make_squat_frame(knee_angle=170))
    assert trainer.missing_landmarks_counter == 0


def test_missing_frames_keep_phase():
    trainer = FormTrainer("squat")
    trainer.process_frame(make_squat_frame(knee_angle=100, hip_y=0.6))
    result = trainer.process_frame(None)
    assert result["phase"] == "descending"
    assert not result["phase_changed"]
    assert trainer.state.metric == pytest.approx(0.6)


def test_feedback_through_trainer():
    analyzer = SquatAnalyzer()
    trainer = FormTrainer(analyzer=analyzer, feedback=CoachFeedback(analyzer, clock=lambda: 100.0))
    frame = make_squat_frame(knee_angle=150, hip_angle=175, back_lean=25)
    first = trainer.process_frame(frame)
    second = trainer.process_frame(frame)
    assert first["feedback"] is None
    assert second["feedback"] == "Stand all the way up between reps"


def test_reset_starts_new_session():
    trainer = FormTrainer("squat")
    trainer.run([make_squat_frame(knee_angle=100, hip_y=0.6), []])
    trainer.reset()
    assert trainer.state == trainer.exercise_analyzer.initial_state()
    assert trainer.frame_count == 0
    assert trainer.missing_landmarks_counter == 0
    assert len(trainer.frame_buffer) == 0
