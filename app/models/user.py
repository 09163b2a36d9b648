from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base
import uuid
from datetime import datetime
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    email = Column(String, unique=True, nullable=True)
    display_name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)  # None for Google users
    google_id = Column(String, unique=True, nullable=True)
    auth_provider = Column(String, nullable=False, default='email')  # 'email' or 'google'
    created_at = Column(DateTime, default=datetime.utcnow)

    subscription = relationship(
        "Subscription",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    analyses = relationship(
        "AnalysisResult",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="AnalysisResult.created_at.desc()",
    )

    def set_password(self, password):
        self.hashed_password = pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        if not self.hashed_password:
            return False
        return pwd_context.verify(password, self.hashed_password)
