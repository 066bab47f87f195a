import logging
from typing import Any, Dict, Optional

import stripe
from sqlalchemy.orm import Session

from readrival.core.exceptions import (
    ServiceUnavailableException,
    UnauthorizedException,
    UpstreamException,
)
from readrival.core.settings import settings
from readrival.crud.subscription import crud_subscription
from readrival.models.profile import Profile
from readrival.models.subscription import PlanType

logger = logging.getLogger(__name__)

# Amounts in cents
PLAN_PRICES = {
    PlanType.MONTHLY: 399,
    PlanType.YEARLY: 3900,
    PlanType.LIFETIME: 9900,
}

PLAN_INTERVALS = {
    PlanType.MONTHLY: "month",
    PlanType.YEARLY: "year",
}


def build_checkout_params(
    plan_type: PlanType, *, customer_id: str, user_id: str, origin: str
) -> Dict[str, Any]:
    """Checkout session parameters: one-time payment for lifetime, recurring otherwise."""
    plan_type = PlanType(plan_type)
    metadata = {"user_id": user_id, "plan_type": plan_type.value}
    params: Dict[str, Any] = {
        "customer": customer_id,
        "success_url": f"{origin}/subscription-success?plan={plan_type.value}",
        "cancel_url": f"{origin}/subscription-canceled",
        "metadata": metadata,
    }

    price_data: Dict[str, Any] = {
        "currency": settings.CHECKOUT_CURRENCY,
        "unit_amount": PLAN_PRICES[plan_type],
    }
    if plan_type == PlanType.LIFETIME:
        price_data["product_data"] = {
            "name": "ReadRival Premium Lifetime",
            "description": "Lifetime access to all premium features",
        }
        params["mode"] = "payment"
    else:
        price_data["product_data"] = {
            "name": f"ReadRival Premium {plan_type.value.capitalize()}",
            "description": "Access to all premium features",
        }
        price_data["recurring"] = {"interval": PLAN_INTERVALS[plan_type]}
        params["mode"] = "subscription"
        params["subscription_data"] = {"metadata": metadata}

    params["line_items"] = [{"price_data": price_data, "quantity": 1}]
    return params


class SubscriptionService:
    def _request_options(self) -> Dict[str, Any]:
        return {
            "api_key": settings.STRIPE_SECRET_KEY,
            "stripe_version": settings.STRIPE_API_VERSION,
        }

    def _get_or_create_customer(self, email: str) -> str:
        options = self._request_options()
        customers = stripe.Customer.list(email=email, limit=1, **options)
        if customers.data:
            return customers.data[0].id
        customer = stripe.Customer.create(email=email, **options)
        return customer.id

    def create_checkout(
        self,
        db: Session,
        *,
        user: Profile,
        plan_type: PlanType,
        origin: Optional[str] = None,
    ) -> Dict[str, str]:
        """Create a hosted checkout session and record a pending subscription."""
        if not settings.STRIPE_SECRET_KEY:
            raise ServiceUnavailableException(detail="Stripe is not configured")
        if not user.email:
            raise UnauthorizedException(detail="User email is required for checkout")

        plan_type = PlanType(plan_type)
        origin = (origin or settings.DEFAULT_FRONTEND_ORIGIN).rstrip("/")

        try:
            customer_id = self._get_or_create_customer(user.email)
            session = stripe.checkout.Session.create(
                **build_checkout_params(
                    plan_type, customer_id=customer_id, user_id=user.id, origin=origin
                ),
                **self._request_options(),
            )
        except stripe.StripeError as e:
            message = getattr(e, "user_message", None) or str(e)
            logger.error(f"Stripe checkout failed for user {user.id}: {message}")
            raise UpstreamException(detail=message)

        crud_subscription.upsert_pending(
            db,
            user_id=user.id,
            plan_type=plan_type.value,
            stripe_customer_id=customer_id,
            checkout_session_id=getattr(session, "id", None),
        )
        logger.info(f"Created {plan_type.value} checkout for user {user.id}")
        return {"url": session.url}


# Singleton instance
subscription_service = SubscriptionService()
