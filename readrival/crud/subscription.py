from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from readrival.crud.base import CRUDBase
from readrival.models.subscription import Subscription
from readrival.schemas.subscription import CheckoutRequest


class CRUDSubscription(CRUDBase[Subscription, CheckoutRequest, CheckoutRequest]):
    def get_by_user(self, db: Session, *, user_id: str) -> Optional[Subscription]:
        return db.query(Subscription).filter(Subscription.user_id == user_id).first()

    def upsert_pending(
        self,
        db: Session,
        *,
        user_id: str,
        plan_type: str,
        stripe_customer_id: Optional[str],
        checkout_session_id: Optional[str],
    ) -> Subscription:
        """One row per user, reset to pending on every checkout."""
        values = {
            "plan_type": plan_type,
            "status": "pending",
            "stripe_customer_id": stripe_customer_id,
            "checkout_session_id": checkout_session_id,
        }
        subscription = self.get_by_user(db, user_id=user_id)
        if subscription is None:
            subscription = Subscription(user_id=user_id, **values)
            db.add(subscription)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                subscription = self.get_by_user(db, user_id=user_id)
                if subscription is None:
                    raise
                return self.update(db, db_obj=subscription, obj_in=values)
            db.refresh(subscription)
            return subscription
        return self.update(db, db_obj=subscription, obj_in=values)


crud_subscription = CRUDSubscription(Subscription)
