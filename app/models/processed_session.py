from sqlalchemy import Column, String, DateTime
from app.database import Base
from datetime import datetime

class ProcessedSession(Base):
    """Checkout sessions whose credits were already applied."""
    __tablename__ = "processed_sessions"

    session_id = Column(String, primary_key=True)
    user_id = Column(String(64), nullable=False)
    plan_key = Column(String, nullable=False)
    processed_at = Column(DateTime, default=datetime.utcnow)
