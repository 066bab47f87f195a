from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from readrival.models.subscription import PlanType


class CheckoutRequest(BaseModel):
    plan_type: PlanType = Field(..., alias="planType")

    model_config = {"populate_by_name": True}


class CheckoutResponse(BaseModel):
    url: str


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    plan_type: PlanType
    status: str
    stripe_customer_id: Optional[str] = None
    created_at: Optional[datetime] = None
