"""GET /v1/analysis/history - Fetch user's saved analyses"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from payment_analyzer.api.v1.schemas import AnalysisStatus, HistoryResponse, HistoryItem
from payment_analyzer.config import settings
from payment_analyzer.infrastructure.database.session import get_db
from payment_analyzer.infrastructure.database.repositories import AnalysisRepository

router = APIRouter()


@router.get("/analysis/history", response_model=HistoryResponse)
def get_analysis_history(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    limit: int = Query(settings.history_page_size, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status: Optional[AnalysisStatus] = Query(None, description="Only analyses in this processing status"),
    search: Optional[str] = Query(None, min_length=1, max_length=100, description="Match description or notes"),
    db: Session = Depends(get_db),
):
    """
    Retrieve a page of a user's analyses, newest first, optionally filtered
    by status or a text search over the metadata.

    Returns:
        Headline totals per analysis; fetch /v1/analysis/{id} for the days
    """
    analysis_repo = AnalysisRepository(db)
    analyses = analysis_repo.get_analyses_by_user(
        user_id, limit=limit, offset=offset, status=status, search=search
    )

    history_items = [
        HistoryItem(
            analysis_id=str(a.id),
            source=a.source,
            status=a.status,
            payment_status=a.payment_status,
            period_start=a.period_start,
            period_end=a.period_end,
            working_days=a.working_days,
            total_consignments=a.total_consignments,
            expected_total=float(a.expected_total),
            paid_total=float(a.paid_total),
            difference_total=float(a.difference_total),
            created_at=a.created_at.isoformat(),
        )
        for a in analyses
    ]

    return HistoryResponse(user_id=user_id, limit=limit, offset=offset, analyses=history_items)
