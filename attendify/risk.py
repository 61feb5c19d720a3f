"""Attendance analysis: threshold classification and projections."""

import math
from typing import Optional, List

from attendify.models import AttendanceAnalysis, OverallStats, ParseResult, SubjectAttendance

STATUS_COLORS = {
    'safe': '#22c55e',
    'warning': '#eab308',
    'critical': '#ef4444',
}

# Below threshold but within this fraction of it is a warning, not critical
WARNING_BAND = 0.67


def compute_overall(subjects: List[SubjectAttendance]) -> OverallStats:
    """
    Sum attendance counts across subjects.

    The overall percentage counts makeup as attended, unlike the
    per-subject percentage of detailed reports.
    """
    total_present = sum(s.present for s in subjects)
    total_absent = sum(s.absent for s in subjects)
    total_od = sum(s.od for s in subjects)
    total_makeup = sum(s.makeup for s in subjects)
    total_classes = sum(s.total_classes for s in subjects)

    if total_classes > 0:
        overall_pct = (total_present + total_od + total_makeup) / total_classes * 100
    else:
        overall_pct = 0.0

    return OverallStats(
        total_present=total_present,
        total_absent=total_absent,
        total_od=total_od,
        total_makeup=total_makeup,
        total_classes=total_classes,
        overall_percentage=overall_pct,
    )


def analyze_attendance(parse_result: ParseResult, threshold: float = 75.0) -> AttendanceAnalysis:
    """
    Derive attendance analytics for a parsed report.

    Args:
        parse_result: Output of parse_attendance_data
        threshold: Minimum attendance percentage to be considered safe

    Returns:
        A fresh AttendanceAnalysis; the parse result is left untouched
    """
    subjects = list(parse_result.subjects)

    lectures = [s for s in subjects if s.type == 'Lecture']
    labs = [s for s in subjects if s.type == 'Lab']
    at_risk = [s for s in subjects if s.percentage < threshold]
    safe = [s for s in subjects if s.percentage >= threshold]

    # sorted() is stable, so ties keep their report order
    ranked = sorted(subjects, key=lambda s: s.percentage, reverse=True)

    return AttendanceAnalysis(
        format=parse_result.format,
        threshold=threshold,
        subjects=subjects,
        records=list(parse_result.records),
        overall=compute_overall(subjects),
        lectures=lectures,
        labs=labs,
        at_risk=at_risk,
        safe=safe,
        best_subject=ranked[0] if ranked else None,
        worst_subject=ranked[-1] if ranked else None,
    )


def _attended(subject: SubjectAttendance) -> int:
    return subject.present + subject.od + subject.makeup


def classes_needed(subject: SubjectAttendance, target: float = 75.0) -> Optional[int]:
    """
    Number of consecutive classes to attend to reach the target percentage.

    Args:
        subject: Subject to project
        target: Target attendance percentage

    Returns:
        0 if the subject is already at or above target (counting makeup as
        attended), otherwise the minimum number of classes, or None when
        the target can never be reached (target of 100% or more)
    """
    if subject.percentage >= target:
        return 0

    ratio = target / 100.0
    deficit = ratio * subject.total_classes - _attended(subject)
    if deficit <= 0:
        return 0
    if ratio >= 1:
        return None

    needed = deficit / (1 - ratio)
    return math.ceil(needed) if needed > 0 else 0


def classes_can_miss(subject: SubjectAttendance, target: float = 75.0) -> Optional[int]:
    """
    Number of classes that can be missed while staying at or above target.

    Returns:
        0 if the subject is below target, None when any number of classes
        can be missed (target of 0% or less), otherwise the count
    """
    if subject.percentage < target:
        return 0
    if target <= 0:
        return None

    can_miss = (_attended(subject) * 100 - target * subject.total_classes) / target
    return math.floor(can_miss) if can_miss > 0 else 0


def get_status_level(percentage: float, threshold: float) -> str:
    """Band a percentage relative to the threshold: safe, warning or critical."""
    if percentage >= threshold:
        return 'safe'
    if percentage >= threshold * WARNING_BAND:
        return 'warning'
    return 'critical'


def get_status_color(level: str) -> str:
    """Get display color for a status level."""
    return STATUS_COLORS.get(level, STATUS_COLORS['critical'])
