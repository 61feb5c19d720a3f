"""Advice text for each subject's attendance standing."""

from typing import Dict

from attendify.models import SubjectAttendance
from attendify.risk import classes_can_miss, classes_needed, get_status_level


def _fmt_threshold(threshold: float) -> str:
    return f"{threshold:g}"


def build_subject_insight(subject: SubjectAttendance, threshold: float) -> Dict[str, str]:
    """Generate a short headline and detail line for a subject."""
    level = get_status_level(subject.percentage, threshold)
    target = _fmt_threshold(threshold)

    if level == 'safe':
        return _safe_insight(subject, threshold, target)
    return _at_risk_insight(subject, threshold, target)


def _safe_insight(subject: SubjectAttendance, threshold: float, target: str) -> Dict[str, str]:
    can_miss = classes_can_miss(subject, threshold)
    if can_miss is None:
        headline = "No minimum to keep"
    elif can_miss == 0:
        headline = "On the edge"
    else:
        headline = f"Can miss {can_miss} more"
    detail = (
        f"{subject.name} is at {subject.percentage:.1f}% "
        f"with {subject.total_classes} classes counted, at or above the {target}% threshold."
    )
    return {'headline': headline, 'detail': detail}


def _at_risk_insight(subject: SubjectAttendance, threshold: float, target: str) -> Dict[str, str]:
    needed = classes_needed(subject, threshold)
    if needed is None:
        headline = f"Cannot reach {target}%"
    elif needed == 0:
        headline = f"On track for {target}%"
    else:
        headline = f"Need {needed} more to reach {target}%"
    detail = (
        f"{subject.name} is at {subject.percentage:.1f}% "
        f"with {subject.absent} absences, below the {target}% threshold."
    )
    return {'headline': headline, 'detail': detail}
