"""
Certificate model - issued once per (user, course)
"""
from sqlalchemy import (
    Column, String, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid, func
)
from sqlalchemy.orm import relationship
from career_hub.database import Base
from career_hub.models.types import utcnow
import uuid


class Certificate(Base):
    """
    Certificates table - never mutated after creation, verified publicly
    by certificate_id
    """
    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_certificate_user_course"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    certificate_id = Column(String(40), unique=True, nullable=False, index=True)
    issued_at = Column(TIMESTAMP, nullable=False, default=utcnow)
    completion_date = Column(TIMESTAMP, nullable=False)
    score = Column(Integer)  # Overall course score, mean of best quiz scores
    verification_url = Column(String)
    pdf_url = Column(String)
    created_at = Column(TIMESTAMP, server_default=func.now())

    user = relationship("User", lazy="joined")
    course = relationship("Course", lazy="joined")

    def __repr__(self):
        return f"<Certificate(certificate_id={self.certificate_id}, user_id={self.user_id})>"
