"""GET/PUT /v1/rules - per-user versioned rate tables"""

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from payment_analyzer.api.v1.schemas import PaymentRulesIn, PaymentRulesSchema, RulesResponse, RulesUpdateRequest
from payment_analyzer.config import settings
from payment_analyzer.domain.exceptions import InvalidPaymentRulesError
from payment_analyzer.domain.models import PaymentRules
from payment_analyzer.infrastructure.database.repositories import PaymentRulesRepository, to_payment_rules
from payment_analyzer.infrastructure.database.session import get_db

router = APIRouter()


def resolve_payment_rules(
    db: Session,
    user_id: Optional[str],
    overrides: Optional[PaymentRulesIn] = None,
) -> Tuple[PaymentRules, int]:
    """
    Pick the rate table for a calculation.

    Precedence: request overrides > user's active stored rules > configured
    defaults. Returns the rules and the stored version they derive from
    (0 for defaults).
    """
    base = settings.default_payment_rules()
    version = 0

    if user_id:
        stored = PaymentRulesRepository(db).get_active_rules(user_id)
        if stored is not None:
            base = to_payment_rules(stored)
            version = stored.version

    if overrides is not None:
        base = base.with_overrides(overrides.model_dump())

    return base, version


@router.get("/rules", response_model=RulesResponse)
def get_rules(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Active rate table for a user (configured defaults when none stored)"""
    rules, version = resolve_payment_rules(db, user_id)
    return RulesResponse(user_id=user_id, version=version, payment_rules=PaymentRulesSchema.from_domain(rules))


@router.put("/rules", response_model=RulesResponse)
def update_rules(request_body: RulesUpdateRequest, db: Session = Depends(get_db)):
    """
    Store a new rules version for the user.

    Omitted fields keep their current value; the previous version is
    deactivated rather than overwritten so old analyses stay explainable.
    """
    try:
        rules, _ = resolve_payment_rules(db, request_body.user_id, request_body.payment_rules)
        db_rules = PaymentRulesRepository(db).create_rules_version(request_body.user_id, rules)
        db.commit()
    except InvalidPaymentRulesError as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))

    logging.info(
        "Payment rules updated",
        extra={"user_id": request_body.user_id, "version": db_rules.version, "step": "rules_update"},
    )
    return RulesResponse(
        user_id=request_body.user_id,
        version=db_rules.version,
        payment_rules=PaymentRulesSchema.from_domain(rules),
    )
