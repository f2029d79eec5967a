"""POST /v1/calculate, POST /v1/analysis, GET/PATCH/DELETE /v1/analysis/{analysis_id}"""

import logging
import time
from typing import List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from payment_analyzer.api.dependencies import get_request_id, parse_analysis_id
from payment_analyzer.api.v1.rules import resolve_payment_rules
from payment_analyzer.api.v1.schemas import (
    AnalysisCreatedResponse,
    AnalysisDetailResponse,
    AnalysisRequest,
    AnalysisStatusResponse,
    AnalysisStatusUpdate,
    CalculateRequest,
    CalculationResponse,
    DailyEntryIn,
    DaySchema,
    PaymentRulesSchema,
    TotalsSchema,
    WeekSchema,
)
from payment_analyzer.config import settings
from payment_analyzer.domain.calculation import generate_analysis_summary, process_daily_records
from payment_analyzer.domain.exceptions import (
    AnalysisNotFoundError,
    AnalysisValidationError,
    InvalidEntryDataError,
    InvalidPaymentRulesError,
)
from payment_analyzer.domain.models import AnalysisSummary, PaymentRules, ValidationResult
from payment_analyzer.domain.validation import validate_analysis
from payment_analyzer.infrastructure.database.models import Analysis
from payment_analyzer.infrastructure.database.repositories import AnalysisRepository, to_analysis_summary
from payment_analyzer.infrastructure.database.session import get_db
from payment_analyzer.infrastructure.observability.logging import log_analysis
from payment_analyzer.infrastructure.observability.metrics import record_analysis

router = APIRouter()


def run_analysis(entries: List[DailyEntryIn], rules: PaymentRules) -> Tuple[AnalysisSummary, ValidationResult]:
    """Calculate every day, aggregate, then validate against the business rules"""
    days = process_daily_records([entry.to_record() for entry in entries], rules)
    summary = generate_analysis_summary(days, settings.rules_version)
    validation = validate_analysis(summary, settings.large_difference_threshold)
    return summary, validation


def load_analysis(repo: AnalysisRepository, analysis_id: str, user_id: str) -> Analysis:
    """
    Fetch an analysis owned by user_id.

    Another user's analysis is reported as not found.

    Raises:
        HTTPException(400): malformed id
        AnalysisNotFoundError: no analysis with that id for this user
    """
    db_analysis = repo.get_user_analysis(parse_analysis_id(analysis_id), user_id)
    if db_analysis is None:
        raise AnalysisNotFoundError(f"Analysis {analysis_id} not found")
    return db_analysis


@router.post("/calculate", response_model=CalculationResponse)
def calculate(request_body: CalculateRequest, db: Session = Depends(get_db)):
    """
    Stateless preview: calculate and validate without saving.

    With a user_id the user's stored rules apply, as they would on save.

    Validation errors are reported in the body, not as an HTTP error, so the
    caller can show them next to the offending days.
    """
    try:
        rules, _ = resolve_payment_rules(db, request_body.user_id, request_body.payment_rules)
        summary, validation = run_analysis(request_body.entries, rules)
    except (InvalidPaymentRulesError, InvalidEntryDataError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    record_analysis("preview", summary.days, validation)
    return CalculationResponse.from_domain(summary, rules, validation)


@router.post("/analysis", response_model=AnalysisCreatedResponse, status_code=201)
def create_analysis(
    request_body: AnalysisRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Run and persist a payment analysis.

    Flow:
    1. Resolve rate table (request overrides > stored user rules > defaults)
    2. Calculate each day, group by week, total
    3. Validate; any error blocks saving (422 with errors + warnings)
    4. Persist analysis and daily entries
    5. Return summary with non-blocking warnings
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        rules, _ = resolve_payment_rules(db, request_body.user_id, request_body.payment_rules)
        summary, validation = run_analysis(request_body.entries, rules)

        if not validation.is_valid:
            record_analysis("rejected", summary.days, validation)
            raise AnalysisValidationError(validation.errors, validation.warnings)

        repo = AnalysisRepository(db)
        metadata = request_body.metadata.model_dump(exclude_none=True) if request_body.metadata else {}
        db_analysis = repo.create_analysis(
            user_id=request_body.user_id,
            source=request_body.source,
            summary=summary,
            rules=rules,
            metadata=metadata,
        )
        db.commit()

        record_analysis("saved", summary.days, validation)
        duration_ms = (time.time() - start_time) * 1000
        log_analysis(
            request_id,
            request_body.user_id,
            str(db_analysis.id),
            True,
            summary.totals.working_days,
            float(summary.totals.difference_total),
            duration_ms,
        )

        return AnalysisCreatedResponse(
            analysis_id=str(db_analysis.id),
            working_days=summary.totals.working_days,
            total_consignments=summary.totals.total_consignments,
            expected_total=float(summary.totals.expected_total),
            paid_total=float(summary.totals.paid_total),
            difference_total=float(summary.totals.difference_total),
            overall_status=summary.overall_status,
            period_range=summary.period_range,
            warnings=validation.warnings,
        )

    except AnalysisValidationError as e:
        db.rollback()
        duration_ms = (time.time() - start_time) * 1000
        log_analysis(request_id, request_body.user_id, None, False, 0, 0.0, duration_ms)
        logging.warning(f"Analysis rejected: {e}", extra={"request_id": request_id})
        return JSONResponse(
            status_code=422,
            content={"detail": "Analysis failed validation", "errors": e.errors, "warnings": e.warnings},
        )

    except (InvalidPaymentRulesError, InvalidEntryDataError) as e:
        db.rollback()
        logging.warning(f"Invalid analysis input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/analysis/{analysis_id}", response_model=AnalysisDetailResponse)
def get_analysis(
    analysis_id: str,
    user_id: str = Query(..., min_length=1, description="Owner of the analysis"),
    db: Session = Depends(get_db),
):
    """
    Retrieve a saved analysis with days, regrouped weeks and totals.

    Returns:
        Full breakdown plus the rate table the analysis was calculated with
    """
    try:
        db_analysis = load_analysis(AnalysisRepository(db), analysis_id, user_id)
    except AnalysisNotFoundError:
        raise HTTPException(status_code=404, detail="Analysis not found")

    return to_detail_response(db_analysis)


def to_detail_response(db_analysis: Analysis) -> AnalysisDetailResponse:
    summary = to_analysis_summary(db_analysis)
    rules = PaymentRules(**db_analysis.payment_rules)

    return AnalysisDetailResponse(
        analysis_id=str(db_analysis.id),
        user_id=db_analysis.user_id,
        source=db_analysis.source,
        status=db_analysis.status,
        payment_status=db_analysis.payment_status,
        overall_status=db_analysis.overall_status,
        period_start=db_analysis.period_start,
        period_end=db_analysis.period_end,
        period_range=summary.period_range,
        rules_version=db_analysis.rules_version,
        payment_rules=PaymentRulesSchema.from_domain(rules),
        totals=TotalsSchema.from_domain(summary.totals),
        average_daily=round(float(summary.average_daily), 2),
        days=[DaySchema.from_domain(d) for d in summary.days],
        weeks=[WeekSchema.from_domain(w) for w in summary.weeks],
        metadata=db_analysis.analysis_metadata or {},
        created_at=db_analysis.created_at.isoformat(),
    )


@router.patch("/analysis/{analysis_id}", response_model=AnalysisStatusResponse)
def update_analysis_status(
    analysis_id: str,
    request_body: AnalysisStatusUpdate,
    user_id: str = Query(..., min_length=1, description="Owner of the analysis"),
    db: Session = Depends(get_db),
):
    """Move an analysis between pending, processing, completed and error"""
    repo = AnalysisRepository(db)
    try:
        db_analysis = load_analysis(repo, analysis_id, user_id)
    except AnalysisNotFoundError:
        raise HTTPException(status_code=404, detail="Analysis not found")

    previous = db_analysis.status
    repo.update_status(db_analysis, request_body.status)
    db.commit()
    logging.info(
        "Analysis status updated",
        extra={
            "analysis_id": analysis_id,
            "from_status": previous,
            "to_status": request_body.status,
            "step": "analysis_status",
        },
    )
    return AnalysisStatusResponse(analysis_id=analysis_id, status=request_body.status)


@router.delete("/analysis/{analysis_id}", status_code=204)
def delete_analysis(
    analysis_id: str,
    user_id: str = Query(..., min_length=1, description="Owner of the analysis"),
    db: Session = Depends(get_db),
):
    """Delete an analysis and its daily entries"""
    repo = AnalysisRepository(db)
    try:
        db_analysis = load_analysis(repo, analysis_id, user_id)
    except AnalysisNotFoundError:
        raise HTTPException(status_code=404, detail="Analysis not found")

    repo.delete_analysis(db_analysis.id)
    db.commit()
    logging.info("Analysis deleted", extra={"analysis_id": analysis_id, "step": "analysis_delete"})
