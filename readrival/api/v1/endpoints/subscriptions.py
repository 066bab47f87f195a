from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from readrival.core.auth import get_current_user
from readrival.core.database import get_db
from readrival.core.exceptions import NotFoundException
from readrival.crud.subscription import crud_subscription
from readrival.models.profile import Profile
from readrival.schemas.response import Messages, SuccessResponse
from readrival.schemas.subscription import (
    CheckoutRequest,
    CheckoutResponse,
    SubscriptionResponse,
)
from readrival.services.subscription_service import subscription_service

router = APIRouter()


@router.post("/checkout", response_model=SuccessResponse[CheckoutResponse])
def create_checkout(
    *,
    request: Request,
    db: Session = Depends(get_db),
    checkout_in: CheckoutRequest,
    current_user: Profile = Depends(get_current_user),
) -> Any:
    """
    Create a hosted checkout session and return its URL.

    Success and cancel URLs are built from the request ``Origin`` header.
    """
    result = subscription_service.create_checkout(
        db,
        user=current_user,
        plan_type=checkout_in.plan_type,
        origin=request.headers.get("origin"),
    )
    return SuccessResponse(
        message=Messages.CHECKOUT_CREATED, data=CheckoutResponse(**result)
    )


@router.get("/me", response_model=SuccessResponse[SubscriptionResponse])
def read_my_subscription(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
) -> Any:
    subscription = crud_subscription.get_by_user(db, user_id=current_user.id)
    if not subscription:
        raise NotFoundException(detail="No subscription found")
    return SuccessResponse(
        message=Messages.DATA_RETRIEVED,
        data=SubscriptionResponse.model_validate(subscription),
    )
