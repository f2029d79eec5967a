"""GET /v1/analysis/{analysis_id}/export and POST /v1/export - CSV or JSON downloads of saved analyses"""

import json
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from payment_analyzer.api.dependencies import parse_analysis_id
from payment_analyzer.api.v1.analysis import load_analysis, to_detail_response
from payment_analyzer.api.v1.schemas import ExportRequest
from payment_analyzer.domain.exceptions import AnalysisNotFoundError
from payment_analyzer.infrastructure.database.repositories import AnalysisRepository, to_analysis_summary
from payment_analyzer.infrastructure.database.session import get_db
from payment_analyzer.utils.export_utils import (
    analyses_to_csv,
    analysis_to_csv,
    bulk_export_filename,
    export_filename,
)

router = APIRouter()

MEDIA_TYPES = {"csv": "text/csv", "json": "application/json"}


def attachment(content: str, format: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
    )


@router.get("/analysis/{analysis_id}/export")
def export_analysis(
    analysis_id: str,
    user_id: str = Query(..., min_length=1, description="Owner of the analysis"),
    format: Literal["csv", "json"] = Query("csv"),
    include_metadata: bool = Query(True),
    include_summary: bool = Query(True),
    include_details: bool = Query(True),
    db: Session = Depends(get_db),
):
    """Download an analysis as a report file (attachment)"""
    try:
        db_analysis = load_analysis(AnalysisRepository(db), analysis_id, user_id)
    except AnalysisNotFoundError:
        raise HTTPException(status_code=404, detail="Analysis not found")

    if format == "json":
        content = to_detail_response(db_analysis).model_dump_json(indent=2)
    else:
        content = analysis_to_csv(
            str(db_analysis.id),
            db_analysis.created_at,
            to_analysis_summary(db_analysis),
            include_metadata=include_metadata,
            include_summary=include_summary,
            include_details=include_details,
        )

    return attachment(content, format, export_filename(db_analysis.period_start, format))


@router.post("/export")
def export_analyses(request_body: ExportRequest, db: Session = Depends(get_db)):
    """
    Download several of a user's analyses in one file.

    Selection:
    - analysis_ids: those analyses (ids of other users are ignored)
    - date_range: analyses whose period overlaps the range
    - neither: every analysis of the user

    Returns 404 when nothing matches.
    """
    analysis_ids = None
    if request_body.analysis_ids:
        analysis_ids = [parse_analysis_id(analysis_id) for analysis_id in request_body.analysis_ids]

    date_range = request_body.date_range
    if date_range is not None and date_range.start > date_range.end:
        raise HTTPException(status_code=422, detail="date_range start must not be after end")

    analyses = AnalysisRepository(db).get_analyses_for_export(
        request_body.user_id,
        analysis_ids=analysis_ids,
        period_start=date_range.start if date_range else None,
        period_end=date_range.end if date_range else None,
    )
    if not analyses:
        raise HTTPException(status_code=404, detail="No analyses found to export")

    format = request_body.format
    if format == "json":
        content = json.dumps(
            [to_detail_response(a).model_dump(mode="json") for a in analyses],
            indent=2,
            ensure_ascii=False,
        )
    else:
        content = analyses_to_csv((str(a.id), a.created_at, to_analysis_summary(a)) for a in analyses)

    filename = request_body.filename or bulk_export_filename(
        min(a.period_start for a in analyses),
        max(a.period_end for a in analyses),
        format,
    )
    if not filename.endswith(f".{format}"):
        filename = f"{filename}.{format}"

    logging.info(
        "Analyses exported",
        extra={"user_id": request_body.user_id, "count": len(analyses), "format": format, "step": "bulk_export"},
    )
    return attachment(content, format, filename)
