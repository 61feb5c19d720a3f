"""FastAPI main application for Attendify."""

import traceback
from typing import List

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import pandas as pd

from attendify import settings
from attendify.app_logger import get_logger
from attendify.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    BreakdownRequest,
    BreakdownResponse,
    DataFormat,
    ParseRequest,
    ParseResult,
    SubjectProjection,
)
from attendify.parsers import parse_attendance_data
from attendify.risk import (
    analyze_attendance,
    classes_can_miss,
    classes_needed,
    get_status_color,
    get_status_level,
)
from attendify.breakdown import group_by_date, records_frame, subject_codes, subject_stats
from attendify.insights import build_subject_insight

logger = get_logger("api")

NO_DATA_MESSAGE = (
    "Could not parse any attendance data. Make sure you paste the full table, "
    "either the summary or the detailed class-by-class format."
)
EMPTY_INPUT_MESSAGE = "Please paste your attendance data first."

app = FastAPI(title="Attendify", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions and return JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
    """Handle validation errors and return JSON."""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and return JSON."""
    logger.exception("Unhandled error on %s", request.url.path)
    error_detail = str(exc)
    if settings.DEBUG:
        error_detail = f"{str(exc)}\n\n{traceback.format_exc()}"

    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Internal server error: {error_detail}",
            "type": type(exc).__name__
        }
    )


def parse_or_reject(text: str) -> ParseResult:
    """Parse pasted text, raising HTTP errors for empty, oversized or unrecognized input."""
    if len(text.encode("utf-8")) > settings.MAX_INPUT_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"Input too large. Maximum size: {settings.MAX_INPUT_SIZE_KB}KB"
        )
    if not text.strip():
        raise HTTPException(status_code=400, detail=EMPTY_INPUT_MESSAGE)

    result = parse_attendance_data(text)
    if not result.subjects:
        logger.info("No attendance data recognized in %d characters of input", len(text))
        raise HTTPException(status_code=400, detail=NO_DATA_MESSAGE)
    return result


def build_projections(result: ParseResult, threshold: float) -> List[SubjectProjection]:
    """Project every subject against the threshold, worst attendance first."""
    projections = []
    for subject in sorted(result.subjects, key=lambda s: s.percentage):
        level = get_status_level(subject.percentage, threshold)
        insight = build_subject_insight(subject, threshold)
        projections.append(SubjectProjection(
            code=subject.code,
            name=subject.name,
            percentage=subject.percentage,
            status_level=level,
            status_color=get_status_color(level),
            classes_needed=classes_needed(subject, threshold),
            classes_can_miss=classes_can_miss(subject, threshold),
            headline=insight['headline'],
            detail=insight['detail'],
        ))
    return projections


@app.get("/health")
async def health_check():
    """Health check endpoint to test server connectivity."""
    return JSONResponse(content={"status": "ok", "message": "Server is running"})


@app.get("/thresholds")
async def get_thresholds():
    """Get the preset thresholds offered to users."""
    return {
        'default': settings.DEFAULT_THRESHOLD,
        'presets': settings.THRESHOLD_PRESETS,
    }


@app.post("/parse", response_model=ParseResult)
async def parse_report(request: ParseRequest):
    """Parse a pasted attendance report."""
    result = parse_or_reject(request.text)
    logger.info("Parsed %s report with %d subjects", result.format.value, len(result.subjects))
    return result


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze_report(request: AnalyzeRequest):
    """Parse a pasted report and analyze it against a threshold."""
    threshold = request.threshold if request.threshold is not None else settings.DEFAULT_THRESHOLD
    result = parse_or_reject(request.text)
    analysis = analyze_attendance(result, threshold)

    summary = {
        'Total': len(analysis.subjects),
        'At Risk': len(analysis.at_risk),
        'Safe': len(analysis.safe),
        'Lectures': len(analysis.lectures),
        'Labs': len(analysis.labs),
    }

    logger.info(
        "Results: %d subjects (%d at risk, %d safe) at %g%%",
        summary["Total"], summary["At Risk"], summary["Safe"], threshold
    )

    return AnalyzeResponse(
        success=True,
        message=f"Successfully analyzed {len(analysis.subjects)} subjects",
        analysis=analysis,
        projections=build_projections(result, threshold),
        summary=summary,
    )


@app.post("/breakdown", response_model=BreakdownResponse)
async def breakdown_report(request: BreakdownRequest):
    """Class-by-class breakdown of a detailed report."""
    result = parse_or_reject(request.text)
    if result.format != DataFormat.DETAILED:
        raise HTTPException(
            status_code=400,
            detail="Class-by-class breakdown needs the detailed report format."
        )

    return BreakdownResponse(
        subject_codes=subject_codes(result.records),
        subject_stats=subject_stats(result.records),
        by_date=group_by_date(result.records, request.code),
    )


@app.post("/records.csv")
async def download_csv(request: ParseRequest):
    """Export parsed rows as CSV: class records for detailed reports, subjects otherwise."""
    result = parse_or_reject(request.text)

    if result.format == DataFormat.DETAILED:
        df = records_frame(result.records)
        filename = "attendance_records.csv"
    else:
        df = pd.DataFrame([s.model_dump() for s in result.subjects])
        filename = "attendance_subjects.csv"

    return StreamingResponse(
        iter([df.to_csv(index=False)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
