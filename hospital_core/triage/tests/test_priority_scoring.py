# hospital_core/triage/tests/test_priority_scoring.py
import pytest

from hospital_core.triage.scoring import (
    CRITICAL,
    HIGH,
    LOW,
    MEDIUM,
    VitalsSnapshot,
    blood_pressure_points,
    heart_rate_points,
    oxygen_saturation_points,
    priority_level,
    priority_score,
    temperature_points,
)


def test_all_vitals_missing_scores_zero():
    assert priority_score(VitalsSnapshot()) == 0
    assert priority_level(0) == LOW


def test_normal_vitals_score_zero():
    v = VitalsSnapshot(
        body_temperature=36.8,
        heart_rate=72,
        blood_pressure_systolic=115,
        blood_pressure_diastolic=75,
        oxygen_saturation=99,
    )
    assert priority_score(v) == 0


@pytest.mark.parametrize(
    "celsius, points",
    [
        (34.9, 3),
        (39.1, 3),
        (35.5, 2),
        (38.5, 2),
        (36.0, 1),
        (37.5, 1),
        (36.1, 0),
        (37.2, 0),
        (None, 0),
    ],
)
def test_temperature_bands(celsius, points):
    assert temperature_points(celsius) == points


@pytest.mark.parametrize(
    "bpm, points",
    [(45, 3), (130, 3), (55, 2), (110, 2), (60, 0), (100, 0), (None, 0)],
)
def test_heart_rate_bands(bpm, points):
    assert heart_rate_points(bpm) == points


def test_blood_pressure_either_component_triggers_band():
    assert blood_pressure_points(120, 115) == 3
    assert blood_pressure_points(185, 70) == 3
    assert blood_pressure_points(145, 70) == 2
    assert blood_pressure_points(110, 85) == 1
    assert blood_pressure_points(120, 80) == 0


def test_blood_pressure_one_sided_reading_is_scored():
    assert blood_pressure_points(190, None) == 3
    assert blood_pressure_points(None, 95) == 2
    assert blood_pressure_points(None, None) == 0


def test_oxygen_saturation_bands():
    assert oxygen_saturation_points(85) == 3
    assert oxygen_saturation_points(92) == 2
    assert oxygen_saturation_points(97) == 1
    assert oxygen_saturation_points(98) == 0


def test_measured_zero_is_scored_not_treated_as_missing():
    assert heart_rate_points(0) == 3
    assert oxygen_saturation_points(0) == 3
    assert priority_score(VitalsSnapshot(heart_rate=0)) == 3


def test_worst_case_is_twelve_and_critical():
    v = VitalsSnapshot(
        body_temperature=40.0,
        heart_rate=140,
        blood_pressure_systolic=200,
        blood_pressure_diastolic=120,
        oxygen_saturation=85,
    )
    assert priority_score(v) == 12
    assert priority_level(12) == CRITICAL


@pytest.mark.parametrize(
    "score, level",
    [(0, LOW), (1, MEDIUM), (2, MEDIUM), (3, HIGH), (5, HIGH), (6, CRITICAL)],
)
def test_priority_level_thresholds(score, level):
    assert priority_level(score) == level


def test_score_accepts_objects_missing_attributes():
    class Partial:
        heart_rate = 130

    assert priority_score(Partial()) == 3
