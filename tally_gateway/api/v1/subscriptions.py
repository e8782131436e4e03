"""/v1/subscriptions - store and fetch a user's subscriptions"""

import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from tally_gateway.api.v1.schemas import SubscriptionCreate, SubscriptionListResponse, SubscriptionResponse
from tally_gateway.api.dependencies import get_request_id
from tally_gateway.config import settings
from tally_gateway.infrastructure.database.models import Subscription
from tally_gateway.infrastructure.database.session import get_db
from tally_gateway.infrastructure.database.repositories import SubscriptionRepository

router = APIRouter()


def parse_subscription_id(subscription_id: str) -> uuid.UUID:
    """Parse a path/body subscription id, 400 on malformed input"""
    try:
        return uuid.UUID(subscription_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid subscription ID format")


def to_subscription_response(subscription: Subscription) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=str(subscription.id),
        user_id=subscription.user_id,
        name=subscription.name,
        service_provider=subscription.service_provider,
        category=subscription.category,
        amount=float(subscription.amount),
        currency=subscription.currency,
        recurrence=subscription.recurrence,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        next_payment_date=subscription.next_payment_date,
        is_active=subscription.is_active,
        status=subscription.status,
        roi_expected=float(subscription.roi_expected) if subscription.roi_expected is not None else None,
        roi_actual=float(subscription.roi_actual) if subscription.roi_actual is not None else None,
        created_at=subscription.created_at.isoformat(),
    )


@router.post("/subscriptions", response_model=SubscriptionResponse, status_code=201)
def create_subscription(
    request_body: SubscriptionCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """Store a subscription for a user"""
    request_id = get_request_id(request)
    fields = request_body.model_dump(exclude={"user_id"})

    try:
        repo = SubscriptionRepository(db)
        subscription = repo.create_subscription(request_body.user_id, **fields)
        db.commit()
        db.refresh(subscription)
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to store subscription: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(
        "Subscription stored",
        extra={"request_id": request_id, "user_id": request_body.user_id, "subscription_id": str(subscription.id)},
    )
    return to_subscription_response(subscription)


@router.get("/subscriptions", response_model=SubscriptionListResponse)
def list_subscriptions(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    List a user's subscriptions.

    Returns:
        Active, paused and cancelled subscriptions, soonest payment first
    """
    repo = SubscriptionRepository(db)
    subscriptions = repo.get_subscriptions_by_user(user_id, limit=settings.list_limit)
    return SubscriptionListResponse(
        user_id=user_id,
        subscriptions=[to_subscription_response(s) for s in subscriptions],
    )


@router.get("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(
    subscription_id: str,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """Fetch one subscription owned by the user"""
    subscription_uuid = parse_subscription_id(subscription_id)

    repo = SubscriptionRepository(db)
    subscription = repo.get_subscription(user_id, subscription_uuid)

    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")

    return to_subscription_response(subscription)
