from sqlalchemy import Column, String, Text, JSON, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
import uuid
from datetime import datetime

class AnalysisResult(Base):
    __tablename__ = "analysis_results"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    face_shape = Column(String, nullable=False)
    face_shape_description = Column(Text, nullable=False)
    feature_ratings = Column(JSON, nullable=False)  # ordered list of {name, rating, description}
    image_urls = Column(JSON, nullable=False)  # [front, left, right]
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="analyses")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "face_shape": {
                "shape": self.face_shape,
                "description": self.face_shape_description,
            },
            "feature_ratings": self.feature_ratings,
            "image_urls": self.image_urls,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
