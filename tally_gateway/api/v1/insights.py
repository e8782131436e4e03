"""Portfolio insight endpoints: summary, duplicates, overlaps, payment timeline"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from tally_gateway.api.v1.schemas import (
    CategorySpend,
    DuplicateGroupSchema,
    DuplicatesResponse,
    OverlapGroupSchema,
    OverlapsResponse,
    SubscriptionBrief,
    SummaryResponse,
    TimelineDaySchema,
    TimelineResponse,
)
from tally_gateway.api.dependencies import get_request_id
from tally_gateway.infrastructure.database.session import get_db
from tally_gateway.infrastructure.database.repositories import SubscriptionRepository
from tally_gateway.domain.exceptions import ValidationError
from tally_gateway.domain.frequency import normalize_to_monthly
from tally_gateway.domain.models import RecurringObligation
from tally_gateway.domain.portfolio import find_duplicate_services, find_overlapping_categories, summarize_portfolio
from tally_gateway.domain.timeline import build_payment_timeline, payments_from_obligations
from tally_gateway.infrastructure.observability.metrics import duplicate_group_counter

router = APIRouter()


def load_obligations(db: Session, user_id: str, request_id: str) -> List[RecurringObligation]:
    """Fetch all of a user's subscriptions as obligations, 422 if a stored row is invalid"""
    try:
        # Aggregates cover every row; list_limit only caps listing endpoints
        return SubscriptionRepository(db).get_obligations_by_user(user_id, limit=None)
    except ValidationError as e:
        logging.warning(f"Invalid subscription data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))


def to_brief(obligation: RecurringObligation) -> SubscriptionBrief:
    return SubscriptionBrief(
        id=obligation.id,
        name=obligation.name,
        service_provider=obligation.service_provider,
        amount=obligation.amount,
        recurrence=obligation.recurrence,
        monthly_cost=normalize_to_monthly(obligation.amount, obligation.recurrence),
    )


@router.get("/subscriptions/summary", response_model=SummaryResponse)
def get_subscription_summary(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Recurring spend across the user's billable subscriptions.

    Returns:
        Monthly/annual totals, counts by category and cadence, spend by category
    """
    obligations = load_obligations(db, user_id, get_request_id(request))
    summary = summarize_portfolio(obligations)

    return SummaryResponse(
        user_id=user_id,
        subscription_count=summary.subscription_count,
        total_monthly_cost=summary.total_monthly_cost,
        total_annual_cost=summary.total_annual_cost,
        count_by_category=summary.count_by_category,
        count_by_cadence=summary.count_by_cadence,
        monthly_cost_by_category=[
            CategorySpend(category=category, monthly_cost=cost)
            for category, cost in summary.monthly_cost_by_category
        ],
    )


@router.get("/subscriptions/duplicates", response_model=DuplicatesResponse)
def get_duplicate_services(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Groups of subscriptions that look redundant, with estimated savings"""
    obligations = load_obligations(db, user_id, get_request_id(request))
    groups = find_duplicate_services(obligations)
    duplicate_group_counter.inc(len(groups))

    return DuplicatesResponse(
        user_id=user_id,
        groups=[
            DuplicateGroupSchema(
                category=g.category,
                reason=g.reason,
                recommendation=g.recommendation,
                subscriptions=[to_brief(o) for o in g.obligations],
                combined_monthly_cost=g.combined_monthly_cost,
                estimated_monthly_savings=g.estimated_monthly_savings,
            )
            for g in groups
        ],
    )


@router.get("/subscriptions/overlaps", response_model=OverlapsResponse)
def get_overlapping_subscriptions(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Categories holding two or more active subscriptions"""
    obligations = load_obligations(db, user_id, get_request_id(request))

    return OverlapsResponse(
        user_id=user_id,
        groups=[
            OverlapGroupSchema(
                category=g.category,
                count=g.count,
                subscriptions=[to_brief(o) for o in g.obligations],
            )
            for g in find_overlapping_categories(obligations)
        ],
    )


@router.get("/payments/timeline", response_model=TimelineResponse)
def get_payment_timeline(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Upcoming subscription charges bucketed by day of month, with running balance (bill_total is always 0)"""
    obligations = load_obligations(db, user_id, get_request_id(request))
    timeline = build_payment_timeline(payments_from_obligations(obligations))

    return TimelineResponse(
        user_id=user_id,
        total=timeline.total,
        max_daily_total=timeline.max_daily_total,
        days=[
            TimelineDaySchema(
                day=d.day,
                total=d.total,
                bill_total=d.bill_total,
                subscription_total=d.subscription_total,
                payment_count=d.payment_count,
                running_balance=d.running_balance,
            )
            for d in timeline.days
        ],
    )
