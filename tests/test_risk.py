"""Unit tests for attendance analysis module."""

import pytest

from attendify.models import DataFormat, ParseResult, SubjectAttendance
from attendify.parsers import parse_attendance_data
from attendify.risk import (
    analyze_attendance,
    classes_can_miss,
    classes_needed,
    compute_overall,
    get_status_color,
    get_status_level,
)
from attendify.insights import build_subject_insight


def make_subject(subject_id=1, code="CS101", subject_type="Lecture", present=0, od=0,
                 makeup=0, absent=0, percentage=None, total_classes=None):
    if total_classes is None:
        total_classes = present + od + absent
    if percentage is None:
        percentage = round((present + od) / total_classes * 100, 2) if total_classes else 0.0
    return SubjectAttendance(
        id=subject_id,
        code=code,
        name=f"Subject {code}",
        type=subject_type,
        present=present,
        od=od,
        makeup=makeup,
        absent=absent,
        percentage=percentage,
        total_classes=total_classes,
    )


SUMMARY_TEXT = "\n".join([
    "1 CS101 Data Structures Lecture 18 2 0 5 80.00",
    "2 CS102 Operating Systems Lecture 10 0 0 10 50.00",
    "3 CS103 Systems Lab Lab 8 0 2 0 100.00",
])


def test_analyze_summary_report():
    """Test totals, partitions and extrema."""
    analysis = analyze_attendance(parse_attendance_data(SUMMARY_TEXT), threshold=75)

    assert analysis.format == DataFormat.SUMMARY
    assert analysis.threshold == 75
    assert analysis.overall.total_present == 36
    assert analysis.overall.total_od == 2
    assert analysis.overall.total_makeup == 2
    assert analysis.overall.total_absent == 15
    assert analysis.overall.total_classes == 55
    assert analysis.overall.overall_percentage == pytest.approx(40 / 55 * 100)

    assert [s.code for s in analysis.lectures] == ["CS101", "CS102"]
    assert [s.code for s in analysis.labs] == ["CS103"]
    assert [s.code for s in analysis.at_risk] == ["CS102"]
    assert [s.code for s in analysis.safe] == ["CS101", "CS103"]
    assert analysis.best_subject.code == "CS103"
    assert analysis.worst_subject.code == "CS102"


def test_overall_percentage_counts_makeup():
    """Test the aggregate formula includes makeup in the numerator."""
    subjects = [make_subject(present=3, makeup=1, absent=1)]
    overall = compute_overall(subjects)

    assert overall.total_classes == 4
    assert overall.overall_percentage == 100.0


def test_analyze_empty_result():
    """Test analysis of an empty parse."""
    analysis = analyze_attendance(ParseResult(format=DataFormat.SUMMARY), threshold=75)

    assert analysis.subjects == []
    assert analysis.overall.total_classes == 0
    assert analysis.overall.overall_percentage == 0
    assert analysis.best_subject is None
    assert analysis.worst_subject is None


def test_threshold_boundary_is_safe():
    """Test a subject exactly at the threshold is safe."""
    subject = make_subject(present=3, absent=1)
    assert subject.percentage == 75.0

    result = ParseResult(format=DataFormat.DETAILED, subjects=[subject])
    analysis = analyze_attendance(result, threshold=75)

    assert analysis.at_risk == []
    assert [s.code for s in analysis.safe] == ["CS101"]


def test_other_types_in_neither_partition():
    """Test unknown types stay in subjects only."""
    subjects = [
        make_subject(1, "CS101", "Lecture", present=1),
        make_subject(2, "CS102", "Tutorial", present=1),
    ]
    analysis = analyze_attendance(ParseResult(format=DataFormat.SUMMARY, subjects=subjects))

    assert len(analysis.subjects) == 2
    assert [s.code for s in analysis.lectures] == ["CS101"]
    assert analysis.labs == []


def test_best_worst_ties_keep_order():
    """Test stable ordering decides ties."""
    subjects = [
        make_subject(1, "A1", present=1),
        make_subject(2, "B2", present=1),
        make_subject(3, "C3", present=1),
    ]
    analysis = analyze_attendance(ParseResult(format=DataFormat.SUMMARY, subjects=subjects))

    assert analysis.best_subject.code == "A1"
    assert analysis.worst_subject.code == "C3"


def test_analyze_does_not_mutate_input():
    """Test the parse result is unchanged and repeat calls agree."""
    result = parse_attendance_data(SUMMARY_TEXT)
    before = result.model_copy(deep=True)

    first = analyze_attendance(result, 80)
    second = analyze_attendance(result, 80)

    assert result == before
    assert first == second


def test_classes_needed():
    """Test classes needed to reach the target."""
    # 5/10 attended; (0.75*10 - 5) / 0.25 = 10
    subject = make_subject(present=5, absent=5)
    assert classes_needed(subject, 75) == 10

    # (0.75*4 - 2) / 0.25 = 4
    subject = make_subject(present=2, absent=2)
    assert classes_needed(subject, 75) == 4

    # Rounds up: (0.7*4 - 2) / 0.3 = 2.67
    assert classes_needed(subject, 70) == 3


def test_classes_needed_already_safe():
    """Test no classes are needed at or above target."""
    assert classes_needed(make_subject(present=9, absent=1), 75) == 0
    assert classes_needed(make_subject(present=3, absent=1), 75) == 0


def test_classes_needed_counts_makeup_as_attended():
    """Test the projection treats makeup as attended."""
    # Reported below target, but makeup already covers it
    subject = make_subject(present=2, makeup=2, absent=2, percentage=50.0, total_classes=4)
    assert classes_needed(subject, 75) == 0


def test_classes_needed_unreachable_target():
    """Test a target of 100% or more cannot be reached after an absence."""
    subject = make_subject(present=9, absent=1)
    assert classes_needed(subject, 100) is None
    assert classes_needed(subject, 120) is None
    assert classes_needed(make_subject(present=4), 100) == 0


def test_classes_needed_full_target_met_by_makeup():
    """Test attended makeup hours can already meet a 100% target."""
    text = "\n".join([
        "1\tCS101\tDS\tLecture\tDr. Rao\t2026-02-12\t9:00\t1\tP",
        "2\tCS101\tDS\tLecture\tDr. Rao\t2026-02-13\t9:00\t1\tA",
        "3\tCS101\tDS\tMAKEUP\tLecture\tDr. Rao\t2026-02-14\t9:00\t1\tP",
    ])
    subject = parse_attendance_data(text).subjects[0]
    assert (subject.present, subject.makeup, subject.absent, subject.total_classes) == (2, 1, 1, 3)
    assert subject.percentage == 66.67

    assert classes_needed(subject, 100) == 0
    assert build_subject_insight(subject, 100)["headline"] == "On track for 100%"


def test_classes_can_miss():
    """Test classes that can be missed while staying safe."""
    # (9*100 - 75*10) / 75 = 2
    subject = make_subject(present=9, absent=1)
    assert classes_can_miss(subject, 75) == 2

    # (18*100 - 75*20) / 75 = 4
    subject = make_subject(present=18, absent=2)
    assert classes_can_miss(subject, 75) == 4


def test_classes_can_miss_below_target():
    """Test nothing can be missed below target."""
    assert classes_can_miss(make_subject(present=1, absent=1), 75) == 0


def test_classes_can_miss_zero_target():
    """Test a zero target allows unlimited misses."""
    assert classes_can_miss(make_subject(present=1, absent=1), 0) is None


def test_projections_at_threshold_are_both_zero():
    """Test a subject exactly at the threshold needs nothing and can miss nothing."""
    subject = make_subject(present=3, absent=1)

    assert classes_needed(subject, 75) == 0
    assert classes_can_miss(subject, 75) == 0


def test_projections_do_not_mutate_subject():
    """Test projection helpers leave the subject unchanged."""
    subject = make_subject(present=5, absent=5)
    before = subject.model_copy()

    classes_needed(subject, 75)
    classes_can_miss(subject, 40)

    assert subject == before


def test_get_status_level():
    """Test status banding around the threshold."""
    assert get_status_level(75.0, 75) == 'safe'
    assert get_status_level(90.0, 75) == 'safe'
    assert get_status_level(60.0, 75) == 'warning'
    assert get_status_level(51.0, 75) == 'warning'
    assert get_status_level(50.0, 75) == 'critical'
    assert get_status_level(0.0, 75) == 'critical'


def test_get_status_color():
    """Test status colors."""
    assert get_status_color('safe') == '#22c55e'
    assert get_status_color('warning') == '#eab308'
    assert get_status_color('critical') == '#ef4444'


def test_build_subject_insight():
    """Test insight headlines."""
    at_risk = make_subject(present=5, absent=5)
    assert build_subject_insight(at_risk, 75)['headline'] == "Need 10 more to reach 75%"
    assert build_subject_insight(at_risk, 100)['headline'] == "Cannot reach 100%"

    safe = make_subject(present=9, absent=1)
    assert build_subject_insight(safe, 75)['headline'] == "Can miss 2 more"
    assert build_subject_insight(safe, 0)['headline'] == "No minimum to keep"

    edge = make_subject(present=3, absent=1)
    insight = build_subject_insight(edge, 75)
    assert insight['headline'] == "On the edge"
    assert "75.0%" in insight['detail']
