"""Pasted attendance report parsing and normalization."""

import re
from typing import Callable, Dict, List, Optional, Tuple

from attendify.app_logger import get_logger
from attendify.models import ClassRecord, DataFormat, ParseResult, SubjectAttendance

logger = get_logger("parsers")

KNOWN_STATUSES = ("P", "A", "OD")
MAKEUP_MARKER = "MAKEUP"
DETECTION_LINE_LIMIT = 20

SUMMARY_LINE_RE = re.compile(
    r"^([0-9]+)\s+(\S+)\s+(.+?)\s+(Lecture|Lab)\s+([0-9]+)\s+([0-9]+)\s+([0-9]+)\s+([0-9]+)\s+([0-9.]+)$"
)
_LEADING_INT_RE = re.compile(r"^\s*([+-]?[0-9]+)")
_LEADING_DECIMAL_RE = re.compile(r"^\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+))")
_ROW_NUMBER_RE = re.compile(r"[0-9]+")


def split_lines(raw: Optional[str]) -> List[str]:
    """Split raw text into trimmed, non-empty lines."""
    if not raw:
        return []
    lines = []
    for line in raw.split("\n"):
        line = line.strip()
        if line:
            lines.append(line)
    return lines


def split_fields(line: str) -> List[str]:
    """Split a line on tabs and trim every field."""
    return [part.strip() for part in line.split("\t")]


def is_row_number(value: str) -> bool:
    """True if the field is a run of ASCII digits."""
    return _ROW_NUMBER_RE.fullmatch(value) is not None


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Parse the leading integer of a field.

    Tolerates trailing junk the way pasted tables need ('3 hrs' -> 3).

    Returns:
        The integer, or None if the field does not start with one
    """
    if value is None:
        return None
    match = _LEADING_INT_RE.match(value)
    if not match:
        return None
    return int(match.group(1))


def parse_decimal(value: Optional[str]) -> Optional[float]:
    """Parse the leading decimal number of a field, or None."""
    if value is None:
        return None
    match = _LEADING_DECIMAL_RE.match(value)
    if not match:
        return None
    return float(match.group(1))


def parse_hours(value: Optional[str]) -> int:
    """Parse a session's hour weight; anything missing, unparsable or zero counts as 1."""
    hours = parse_int(value)
    if not hours or hours < 0:
        return 1
    return hours


def _is_detailed_row(parts: List[str]) -> bool:
    return len(parts) >= 8 and parts[-1] in KNOWN_STATUSES


def detect_format(lines: List[str]) -> DataFormat:
    """
    Decide which layout a report uses by looking at its first lines.

    A detailed report has per-class rows of at least 8 tab-separated
    fields ending in a P/A/OD status.
    """
    for line in lines[:DETECTION_LINE_LIMIT]:
        if _is_detailed_row(split_fields(line)):
            return DataFormat.DETAILED
    return DataFormat.SUMMARY


# ─── Summary format ─────────────────────────────────────────

def _summary_subject(
    subject_id: int,
    code: str,
    name: str,
    subject_type: str,
    counts: Tuple[int, int, int, int],
    percentage: float,
) -> SubjectAttendance:
    present, od, makeup, absent = counts
    # The report's own percentage already reconciles makeup, so trust it as-is
    return SubjectAttendance(
        id=subject_id,
        code=code,
        name=name,
        type=subject_type,
        present=present,
        od=od,
        makeup=makeup,
        absent=absent,
        percentage=percentage,
        total_classes=present + od + makeup + absent,
    )


def parse_summary_whitespace(lines: List[str]) -> List[SubjectAttendance]:
    """Match whole lines of a summary table whose columns collapsed to whitespace."""
    subjects = []
    for line in lines:
        match = SUMMARY_LINE_RE.match(line)
        if not match:
            continue
        percentage = parse_decimal(match.group(9))
        if percentage is None:
            continue
        counts = tuple(int(match.group(i)) for i in range(5, 9))
        subjects.append(_summary_subject(
            int(match.group(1)),
            match.group(2),
            match.group(3).strip(),
            match.group(4),
            counts,
            percentage,
        ))
    return subjects


def parse_summary_tabbed(lines: List[str]) -> List[SubjectAttendance]:
    """Read summary rows positionally from tab-preserved lines."""
    subjects = []
    for line in lines:
        parts = split_fields(line)
        if len(parts) < 9 or not is_row_number(parts[0]):
            continue

        counts = tuple(parse_int(parts[i]) for i in range(4, 8))
        if any(count is None for count in counts):
            continue
        percentage = parse_decimal(parts[8])
        if percentage is None:
            continue

        subjects.append(_summary_subject(
            int(parts[0]), parts[1], parts[2], parts[3], counts, percentage
        ))
    return subjects


# Tried in order; the first strategy that yields anything wins
SUMMARY_STRATEGIES: List[Callable[[List[str]], List[SubjectAttendance]]] = [
    parse_summary_whitespace,
    parse_summary_tabbed,
]


def parse_summary(lines: List[str]) -> List[SubjectAttendance]:
    """Parse a summary report, trying each layout strategy in turn."""
    for strategy in SUMMARY_STRATEGIES:
        subjects = strategy(lines)
        if subjects:
            logger.debug("Summary strategy %s matched %d rows", strategy.__name__, len(subjects))
            return subjects
    return []


# ─── Detailed format ────────────────────────────────────────

def resolve_row_layout(parts: List[str]) -> Tuple[bool, List[str]]:
    """
    Resolve the column layout of a detailed row.

    Regular rows:  #, Code, Subject, Type, Faculty, Date, Time, Hours, Status
    Makeup rows:   #, Code, Subject, MAKEUP, Type, Faculty, Date, Time, Hours, Status

    Returns:
        Tuple of (is_makeup, fields) where fields always follow the regular layout
    """
    if len(parts) >= 10 and parts[3] == MAKEUP_MARKER:
        return True, parts[:3] + parts[4:]
    return False, parts


def _field(fields: List[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def extract_class_records(lines: List[str]) -> List[ClassRecord]:
    """Turn the qualifying rows of a detailed report into class records."""
    records = []
    for line in lines:
        parts = split_fields(line)
        if not _is_detailed_row(parts) or not is_row_number(parts[0]):
            continue

        is_makeup, fields = resolve_row_layout(parts)
        records.append(ClassRecord(
            row_id=int(fields[0]),
            code=fields[1],
            subject=fields[2],
            is_makeup=is_makeup,
            type=_field(fields, 3),
            faculty=_field(fields, 4),
            date=_field(fields, 5),
            time=_field(fields, 6),
            hours=parse_hours(_field(fields, 7)),
            status=parts[-1],
        ))
    return records


def group_records_by_code(records: List[ClassRecord]) -> Dict[str, List[ClassRecord]]:
    """Group records by subject code, keeping first-seen code order."""
    groups: Dict[str, List[ClassRecord]] = {}
    for record in records:
        groups.setdefault(record.code, []).append(record)
    return groups


def aggregate_records(records: List[ClassRecord]) -> List[SubjectAttendance]:
    """
    Fold class records into per-subject totals weighted by session hours.

    Makeup sessions only count when attended; a missed makeup class does
    not affect attendance at all. Unknown statuses land in no bucket.
    """
    subjects = []
    for subject_id, (code, group) in enumerate(group_records_by_code(records).items(), start=1):
        first = group[0]
        buckets = {"P": 0, "A": 0, "OD": 0}
        makeup = 0

        for record in group:
            if record.is_makeup and record.status == "A":
                continue
            if record.status in buckets:
                buckets[record.status] += record.hours
            if record.is_makeup:
                makeup += record.hours

        present, absent, od = buckets["P"], buckets["A"], buckets["OD"]
        total = present + od + absent
        percentage = round((present + od) / total * 100, 2) if total > 0 else 0.0

        subjects.append(SubjectAttendance(
            id=subject_id,
            code=code,
            name=first.subject,
            type=first.type,
            present=present,
            od=od,
            makeup=makeup,
            absent=absent,
            percentage=percentage,
            total_classes=total,
        ))
    return subjects


def parse_detailed(lines: List[str]) -> Tuple[List[ClassRecord], List[SubjectAttendance]]:
    """
    Parse a detailed class-by-class report.

    Returns:
        Tuple of (records, subjects)
    """
    records = extract_class_records(lines)
    return records, aggregate_records(records)


# ─── Entry point ────────────────────────────────────────────

def parse_attendance_data(raw: Optional[str]) -> ParseResult:
    """
    Parse a pasted attendance report of either layout.

    Never raises for malformed text: an empty subject list means nothing
    was recognized, and it is up to the caller to report that.
    """
    lines = split_lines(raw)
    data_format = detect_format(lines)

    if data_format == DataFormat.DETAILED:
        records, subjects = parse_detailed(lines)
        logger.debug("Parsed detailed report: %d records, %d subjects", len(records), len(subjects))
        return ParseResult(format=data_format, subjects=subjects, records=records)

    subjects = parse_summary(lines)
    logger.debug("Parsed summary report: %d subjects", len(subjects))
    return ParseResult(format=data_format, subjects=subjects, records=[])


def parse_attendance_table(raw: Optional[str]) -> List[SubjectAttendance]:
    """Parse a report and return only its subjects."""
    return parse_attendance_data(raw).subjects
