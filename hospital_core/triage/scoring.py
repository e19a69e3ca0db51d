# hospital_core/triage/scoring.py
"""
Vital-signs urgency score.

Each vital adds the points of the most severe band it falls in (checked
worst band first, never summed across bands). A vital that was not
measured (None) adds nothing; a measured 0 is scored like any value.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

CRITICAL = "Critical"
HIGH = "High"
MEDIUM = "Medium"
LOW = "Low"


@dataclass(frozen=True)
class VitalsSnapshot:
    body_temperature: Optional[float] = None
    heart_rate: Optional[float] = None
    blood_pressure_systolic: Optional[float] = None
    blood_pressure_diastolic: Optional[float] = None
    oxygen_saturation: Optional[float] = None


def temperature_points(celsius: Optional[float]) -> int:
    if celsius is None:
        return 0
    if celsius < 35 or celsius > 39:
        return 3
    if celsius < 36 or celsius > 38:
        return 2
    if celsius < 36.1 or celsius > 37.2:
        return 1
    return 0


def heart_rate_points(bpm: Optional[float]) -> int:
    if bpm is None:
        return 0
    if bpm < 50 or bpm > 120:
        return 3
    if bpm < 60 or bpm > 100:
        return 2
    return 0


def blood_pressure_points(systolic: Optional[float], diastolic: Optional[float]) -> int:
    """Either component crossing a band's threshold triggers that band."""
    if systolic is None and diastolic is None:
        return 0

    def above(value: Optional[float], limit: float) -> bool:
        return value is not None and value > limit

    if above(systolic, 180) or above(diastolic, 110):
        return 3
    if above(systolic, 140) or above(diastolic, 90):
        return 2
    if above(systolic, 120) or above(diastolic, 80):
        return 1
    return 0


def oxygen_saturation_points(percent: Optional[float]) -> int:
    if percent is None:
        return 0
    if percent < 90:
        return 3
    if percent < 95:
        return 2
    if percent < 98:
        return 1
    return 0


def priority_score(vitals: Any) -> int:
    """
    0..12. Accepts anything with the five vital attributes (VitalSigns row,
    VitalsSnapshot); missing attributes count as not measured.
    """
    def read(name: str) -> Optional[float]:
        return getattr(vitals, name, None)

    return (
        temperature_points(read("body_temperature"))
        + heart_rate_points(read("heart_rate"))
        + blood_pressure_points(read("blood_pressure_systolic"), read("blood_pressure_diastolic"))
        + oxygen_saturation_points(read("oxygen_saturation"))
    )


def priority_level(score: int) -> str:
    """Display label only; queue order uses the raw score."""
    if score >= 6:
        return CRITICAL
    if score >= 3:
        return HIGH
    if score >= 1:
        return MEDIUM
    return LOW
