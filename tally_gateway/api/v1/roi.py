"""/v1/subscriptions/roi - subscription cost and ROI endpoints"""

import time
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from tally_gateway.api.v1.schemas import ROIListResponse, ROIPreviewRequest, ROIRequest, ROIResponse
from tally_gateway.api.v1.subscriptions import parse_subscription_id
from tally_gateway.api.dependencies import get_as_of, get_request_id
from tally_gateway.config import settings
from tally_gateway.infrastructure.database.session import get_db
from tally_gateway.infrastructure.database.repositories import SubscriptionRepository
from tally_gateway.domain.exceptions import SubscriptionNotFoundError, ValidationError
from tally_gateway.domain.frequency import is_unknown_cadence
from tally_gateway.domain.models import CostAnalysis, RecurringObligation
from tally_gateway.domain.roi import analyze, analyze_all
from tally_gateway.infrastructure.observability.metrics import record_roi_analysis, unknown_cadence_counter
from tally_gateway.infrastructure.observability.logging import log_roi_analysis, log_unknown_cadence

router = APIRouter()


def to_roi_response(obligation: RecurringObligation, analysis: CostAnalysis) -> ROIResponse:
    """Merge an obligation's display fields with its cost analysis"""
    return ROIResponse(
        subscription_id=analysis.subscription_id,
        name=obligation.name,
        service_provider=obligation.service_provider,
        category=obligation.category or "general",
        amount=obligation.amount,
        currency=obligation.currency,
        recurrence=obligation.recurrence,
        start_date=obligation.start_date,
        end_date=obligation.end_date,
        duration_months=analysis.duration_months,
        monthly_cost=analysis.monthly_cost,
        annual_cost=analysis.annual_cost,
        total_cost=analysis.total_cost,
        expected_return=analysis.expected_return,
        actual_return=analysis.actual_return,
        roi_percentage=analysis.roi_percentage,
        roi_ratio=analysis.roi_ratio,
        break_even_months=analysis.break_even_months,
        subscription_status=obligation.status or "active",
        roi_status=analysis.roi_status,
    )


def _observe(request_id: str, obligation: RecurringObligation, analysis: CostAnalysis) -> None:
    record_roi_analysis(analysis.roi_status, analysis.break_even_months)
    if is_unknown_cadence(obligation.recurrence):
        unknown_cadence_counter.inc()
        log_unknown_cadence(request_id, obligation.id, obligation.recurrence)


@router.post("/subscriptions/roi", response_model=ROIResponse)
def calculate_subscription_roi(
    request_body: ROIRequest,
    request: Request,
    db: Session = Depends(get_db),
    as_of: date = Depends(get_as_of),
):
    """
    Calculate ROI for one of the user's subscriptions.

    Flow:
    1. Load the subscription, scoped to the user
    2. Adapt the row into a RecurringObligation
    3. Analyze cost, ROI and break-even as of today
    4. Record metrics and logs
    """
    start_time = time.time()
    request_id = get_request_id(request)
    subscription_uuid = parse_subscription_id(request_body.subscription_id)

    try:
        repo = SubscriptionRepository(db)
        obligation = repo.get_obligation(request_body.user_id, subscription_uuid)
        analysis = analyze(obligation, as_of)

    except SubscriptionNotFoundError as e:
        logging.warning(f"Subscription not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Subscription not found")

    except ValidationError as e:
        logging.warning(f"Invalid subscription data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    _observe(request_id, obligation, analysis)
    duration_ms = (time.time() - start_time) * 1000
    log_roi_analysis(request_id, request_body.user_id, 1, duration_ms, subscription_id=obligation.id)

    return to_roi_response(obligation, analysis)


@router.get("/subscriptions/roi", response_model=ROIListResponse)
def list_subscription_roi(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
    as_of: date = Depends(get_as_of),
):
    """
    Calculate ROI for all of a user's subscriptions (active, paused and cancelled).

    Returns:
        One result per subscription, in storage order
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        repo = SubscriptionRepository(db)
        obligations = repo.get_obligations_by_user(user_id, limit=settings.list_limit)
        analyses = analyze_all(obligations, as_of)

    except ValidationError as e:
        logging.warning(f"Invalid subscription data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    for obligation, analysis in zip(obligations, analyses):
        _observe(request_id, obligation, analysis)

    duration_ms = (time.time() - start_time) * 1000
    log_roi_analysis(request_id, user_id, len(analyses), duration_ms)

    return ROIListResponse(
        user_id=user_id,
        as_of=as_of,
        results=[to_roi_response(o, a) for o, a in zip(obligations, analyses)],
    )


@router.post("/subscriptions/roi/preview", response_model=ROIResponse)
def preview_subscription_roi(
    request_body: ROIPreviewRequest,
    request: Request,
    as_of: date = Depends(get_as_of),
):
    """Calculate ROI for an unsaved obligation, e.g. while a form is being filled in"""
    request_id = get_request_id(request)

    try:
        obligation = RecurringObligation(
            id=request_body.id,
            amount=request_body.amount,
            recurrence=request_body.recurrence,
            start_date=request_body.start_date,
            end_date=request_body.end_date,
            roi_expected=request_body.roi_expected,
            roi_actual=request_body.roi_actual,
            currency=settings.default_currency,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    analysis = analyze(obligation, request_body.as_of or as_of)
    _observe(request_id, obligation, analysis)

    return to_roi_response(obligation, analysis)
