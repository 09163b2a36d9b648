from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base

FREE_PLAN_NAME = "Free"
FREE_ANALYSES = 1
FREE_ADVICE_CHATS = 0

class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint("analyses_remaining >= 0", name="ck_subscriptions_analyses_non_negative"),
        CheckConstraint("advice_chats_remaining >= 0", name="ck_subscriptions_advice_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    plan_name = Column(String, nullable=False, default=FREE_PLAN_NAME)
    analyses_remaining = Column(Integer, nullable=False, default=FREE_ANALYSES)
    advice_chats_remaining = Column(Integer, nullable=False, default=FREE_ADVICE_CHATS)
    instagram_credit_claimed = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="subscription")

    def to_dict(self) -> dict:
        return {
            "plan_name": self.plan_name,
            "analyses_remaining": self.analyses_remaining,
            "advice_chats_remaining": self.advice_chats_remaining,
            "instagram_credit_claimed": self.instagram_credit_claimed,
        }
