import math

import pytest

from frames import make_pushup_frame, with_visibility
from form_coach.exercise_analysis import (
    EvaluationResult,
    PhaseState,
    PushupAnalyzer,
    PushupPhase,
    determine_pushup_phase,
    evaluate_pushup_form,
)
from form_coach.exercise_analysis.landmarks import LANDMARK_INDICES


@pytest.fixture
def analyzer():
    return PushupAnalyzer()


def _run_phases(analyzer, elbow_angles):
    state = analyzer.initial_state()
    phases = []
    for elbow in elbow_angles:
        state = analyzer.classify_phase(make_pushup_frame(elbow_angle=elbow), state)
        phases.append(state.phase)
    return phases


# --- Phase classification ---

def test_initial_state_is_top(analyzer):
    assert analyzer.initial_state() == PhaseState(PushupPhase.TOP, None)


def test_full_rep_cycle(analyzer):
    phases = _run_phases(analyzer, [160, 110, 100, 105, 115, 155])
    assert phases == [
        PushupPhase.TOP,
        PushupPhase.DESCENDING,
        PushupPhase.DESCENDING,
        PushupPhase.BOTTOM,
        PushupPhase.ASCENDING,
        PushupPhase.TOP,
    ]


def test_between_thresholds_keeps_phase(analyzer):
    phases = _run_phases(analyzer, [160, 110, 130, 140])
    assert phases == [PushupPhase.TOP, PushupPhase.DESCENDING, PushupPhase.DESCENDING, PushupPhase.DESCENDING]


def test_metric_is_average_elbow_angle(analyzer):
    state = analyzer.classify_phase(make_pushup_frame(elbow_angle=100))
    assert state.phase == PushupPhase.DESCENDING
    assert state.metric == pytest.approx(100.0)


def test_hips_not_needed_for_phase(analyzer):
    frame = with_visibility(make_pushup_frame(elbow_angle=100), "left_hip", 0.0)
    state = analyzer.classify_phase(frame, PhaseState(PushupPhase.TOP, 160.0))
    assert state.phase == PushupPhase.DESCENDING


def test_low_confidence_wrist_keeps_state(analyzer):
    frame = with_visibility(make_pushup_frame(elbow_angle=100), "right_wrist", 0.5)
    state = PhaseState(PushupPhase.ASCENDING, 95.0)
    assert analyzer.classify_phase(frame, state) == state


def test_functional_phase_api():
    phase, elbow = determine_pushup_phase(make_pushup_frame(elbow_angle=105), "descending", 100.0)
    assert phase == PushupPhase.BOTTOM
    assert elbow == pytest.approx(105.0)
    assert determine_pushup_phase([], PushupPhase.BOTTOM, 88.0) == (PushupPhase.BOTTOM, 88.0)


# --- Form evaluation ---

def test_arms_not_extended_at_top(analyzer):
    result = analyzer.evaluate_form(make_pushup_frame(elbow_angle=140), PushupPhase.TOP)
    assert not result.is_correct
    assert list(result.issues) == ["Arms not fully extended at top"]
    assert result.angles["left_elbow"] == pytest.approx(140.0)


def test_good_bottom_position(analyzer):
    result = analyzer.evaluate_form(make_pushup_frame(elbow_angle=90, neck_angle=10), PushupPhase.BOTTOM)
    assert result.is_correct
    assert result.angles["back"] == pytest.approx(0.0)
    assert result.angles["neck"] == pytest.approx(10.0)


def test_bottom_depth_rules(analyzer):
    shallow = analyzer.evaluate_form(make_pushup_frame(elbow_angle=110), PushupPhase.BOTTOM)
    assert list(shallow.issues) == ["Not going deep enough"]
    deep = analyzer.evaluate_form(make_pushup_frame(elbow_angle=60), PushupPhase.BOTTOM)
    assert list(deep.issues) == ["Elbows bent too much"]


def test_sagging_back(analyzer):
    result = analyzer.evaluate_form(make_pushup_frame(elbow_angle=165, hip_drop=0.1), PushupPhase.TOP)
    assert list(result.issues) == ["Back sagging too much"]
    assert result.angles["back"] == pytest.approx(math.degrees(math.atan(0.1 / 0.3)))


def test_piking_hips(analyzer):
    result = analyzer.evaluate_form(make_pushup_frame(elbow_angle=165, hip_drop=-0.1), PushupPhase.TOP)
    assert list(result.issues) == ["Hips too high (piking)"]


def test_small_hip_offset_allowed(analyzer):
    result = analyzer.evaluate_form(make_pushup_frame(elbow_angle=165, hip_drop=0.05), PushupPhase.TOP)
    assert result.is_correct


def test_neck_checked_while_moving_not_at_top(analyzer):
    frame = make_pushup_frame(elbow_angle=165, neck_angle=60)
    assert analyzer.evaluate_form(frame, PushupPhase.TOP).is_correct
    for phase in (PushupPhase.DESCENDING, PushupPhase.ASCENDING, PushupPhase.BOTTOM):
        assert "Neck not in neutral position" in analyzer.evaluate_form(frame, phase).issues


def test_bottom_issue_order(analyzer):
    frame = make_pushup_frame(elbow_angle=110, hip_drop=0.2, neck_angle=70)
    result = analyzer.evaluate_form(frame, PushupPhase.BOTTOM)
    assert list(result.issues) == ["Not going deep enough", "Back sagging too much", "Neck not in neutral position"]


def test_face_visibility_not_required(analyzer):
    frame = with_visibility(make_pushup_frame(elbow_angle=90), "nose", 0.1)
    frame[LANDMARK_INDICES["left_eye"]][3] = 0.0
    result = analyzer.evaluate_form(frame, PushupPhase.BOTTOM)
    assert result.is_correct
    assert result.angles["neck"] == pytest.approx(10.0)


def test_hip_not_visible_short_circuits(analyzer):
    frame = with_visibility(make_pushup_frame(), "right_hip", 0.2)
    result = analyzer.evaluate_form(frame, PushupPhase.BOTTOM)
    assert result == EvaluationResult(False, ["Some key landmarks not visible"])
    assert "angles" not in result.to_dict()


def test_no_landmarks(analyzer):
    assert evaluate_pushup_form(None, "top") == EvaluationResult(False, ["No landmarks detected"])


def test_evaluation_is_idempotent(analyzer):
    frame = make_pushup_frame(elbow_angle=115, hip_drop=0.15, neck_angle=45)
    first = analyzer.evaluate_form(frame, PushupPhase.DESCENDING)
    second = analyzer.evaluate_form(frame, PushupPhase.DESCENDING)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_null_face_entries_leave_neck_unmeasured(analyzer):
    frame = make_pushup_frame(elbow_angle=90, neck_angle=60)
    frame[LANDMARK_INDICES["nose"]] = None
    result = analyzer.evaluate_form(frame, PushupPhase.BOTTOM)
    assert result.is_correct
    assert math.isnan(result.angles["neck"])


def test_null_wrist_keeps_phase(analyzer):
    frame = make_pushup_frame(elbow_angle=100)
    frame[LANDMARK_INDICES["left_wrist"]] = None
    state = PhaseState(PushupPhase.TOP, 160.0)
    assert analyzer.classify_phase(frame, state) == state
    assert list(analyzer.evaluate_form(frame, PushupPhase.TOP).issues) == ["Some key landmarks not visible"]
