import enum

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func

from readrival.core.database import Base, generate_uuid


class PlanType(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    LIFETIME = "lifetime"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    # One subscription row per user, upserted on every checkout
    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    plan_type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    stripe_customer_id = Column(String, nullable=True)
    checkout_session_id = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    def __repr__(self):
        return (
            f"<Subscription(user_id='{self.user_id}', plan='{self.plan_type}', "
            f"status='{self.status}')>"
        )
