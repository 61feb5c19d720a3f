"""Data models for the Attendify attendance analyzer."""

from enum import Enum
from typing import Optional, Dict, List
from pydantic import BaseModel, Field


class DataFormat(str, Enum):
    """Textual layout of a pasted attendance report."""
    SUMMARY = "summary"
    DETAILED = "detailed"


class ClassRecord(BaseModel):
    """One scheduled class session (a row of the detailed report)."""
    row_id: int
    code: str
    subject: str
    is_makeup: bool = False
    type: str
    faculty: str = ""
    date: str = ""
    time: str = ""
    hours: int = 1
    status: str


class SubjectAttendance(BaseModel):
    """Per-subject attendance rollup."""
    id: int
    code: str
    name: str
    type: str
    present: int = 0
    od: int = 0
    makeup: int = 0
    absent: int = 0
    percentage: float = 0.0
    total_classes: int = 0


class ParseResult(BaseModel):
    """Normalized output of the parsing pipeline."""
    format: DataFormat
    subjects: List[SubjectAttendance] = Field(default_factory=list)
    records: List[ClassRecord] = Field(default_factory=list)


class OverallStats(BaseModel):
    """Totals across every subject."""
    total_present: int = 0
    total_absent: int = 0
    total_od: int = 0
    total_makeup: int = 0
    total_classes: int = 0
    overall_percentage: float = 0.0


class AttendanceAnalysis(BaseModel):
    """Analytics derived from a ParseResult for one threshold."""
    format: DataFormat
    threshold: float
    subjects: List[SubjectAttendance]
    records: List[ClassRecord]
    overall: OverallStats
    lectures: List[SubjectAttendance]
    labs: List[SubjectAttendance]
    at_risk: List[SubjectAttendance]
    safe: List[SubjectAttendance]
    best_subject: Optional[SubjectAttendance] = None
    worst_subject: Optional[SubjectAttendance] = None


class ParseRequest(BaseModel):
    """Raw pasted report text."""
    text: str


class AnalyzeRequest(BaseModel):
    """Raw report text plus the attendance threshold to analyze against."""
    text: str
    threshold: Optional[float] = None


class BreakdownRequest(BaseModel):
    """Raw detailed report text, optionally filtered to one subject code."""
    text: str
    code: Optional[str] = None


class SubjectProjection(BaseModel):
    """Threshold projection for a single subject.

    ``classes_needed`` is None when the target cannot be reached and
    ``classes_can_miss`` is None when it is unbounded.
    """
    code: str
    name: str
    percentage: float
    status_level: str
    status_color: str
    classes_needed: Optional[int] = None
    classes_can_miss: Optional[int] = None
    headline: str
    detail: str


class AnalyzeResponse(BaseModel):
    """Response from the analyze endpoint."""
    success: bool
    message: str
    analysis: AttendanceAnalysis
    projections: List[SubjectProjection]
    summary: Dict[str, int]


class SubjectSessionStats(BaseModel):
    """Session counts for one subject in the class-by-class view."""
    code: str
    name: str
    present: int
    absent: int
    od: int
    total: int
    pct: float


class DateGroup(BaseModel):
    """Records that share one date token."""
    date: str
    records: List[ClassRecord]


class BreakdownResponse(BaseModel):
    """Class-by-class breakdown of a detailed report."""
    subject_codes: List[str]
    subject_stats: List[SubjectSessionStats]
    by_date: List[DateGroup]
