"""Class-by-class views over the records of a detailed report."""

import re
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from attendify.models import ClassRecord, DateGroup, SubjectSessionStats

ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

RECORD_COLUMNS = [
    "row_id", "code", "subject", "is_makeup", "type",
    "faculty", "date", "time", "hours", "status",
]


def records_frame(records: List[ClassRecord]) -> pd.DataFrame:
    """Build a DataFrame with one row per class record."""
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    return pd.DataFrame([r.model_dump() for r in records], columns=RECORD_COLUMNS)


def _date_sort_key(date_token: str) -> str:
    match = ISO_DATE_RE.search(date_token)
    return match.group(0) if match else ""


def group_by_date(records: List[ClassRecord], code: Optional[str] = None) -> List[DateGroup]:
    """
    Group records by their date token, newest day first.

    Days are ordered by the ISO date embedded in the token (tokens without
    one sort last); within a day records run from latest time to earliest.

    Args:
        records: Class records of a detailed report
        code: Only include this subject code when given
    """
    if code is not None:
        records = [r for r in records if r.code == code]

    groups: Dict[str, List[ClassRecord]] = {}
    for record in records:
        groups.setdefault(record.date, []).append(record)

    ordered_dates = sorted(groups, key=_date_sort_key, reverse=True)
    return [
        DateGroup(
            date=date,
            records=sorted(groups[date], key=lambda r: r.time, reverse=True),
        )
        for date in ordered_dates
    ]


def subject_codes(records: List[ClassRecord]) -> List[str]:
    """Distinct subject codes, sorted."""
    return sorted({r.code for r in records})


def subject_stats(records: List[ClassRecord]) -> List[SubjectSessionStats]:
    """
    Count sessions per subject by status.

    These are raw session counts, not hour-weighted, and every session is
    counted including missed makeup classes.
    """
    df = records_frame(records)
    if df.empty:
        return []

    counts = pd.crosstab(df["code"], df["status"])
    for status in ("P", "A", "OD"):
        if status not in counts.columns:
            counts[status] = 0

    names = df.groupby("code", sort=False)["subject"].first()

    stats = []
    for code in sorted(counts.index):
        present = int(counts.at[code, "P"])
        absent = int(counts.at[code, "A"])
        od = int(counts.at[code, "OD"])
        total = present + absent + od
        pct = float(np.round((present + od) / total * 100, 2)) if total > 0 else 0.0
        stats.append(SubjectSessionStats(
            code=code,
            name=names[code],
            present=present,
            absent=absent,
            od=od,
            total=total,
            pct=pct,
        ))
    return stats
