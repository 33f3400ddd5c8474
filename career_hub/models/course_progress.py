"""
CourseProgress model - per (user, course) learning state
"""
from sqlalchemy import (
    Column, Integer, Float, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid, func
)
from sqlalchemy.orm import relationship
from career_hub.database import Base
from career_hub.models.types import utcnow
import uuid


class CourseProgress(Base):
    """
    Course progress table - created at enrollment, updated on lesson
    completion and quiz submission, never deleted by the learner flows
    """
    __tablename__ = "course_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_progress_user_course"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    progress_percentage = Column(Integer, nullable=False, default=0)  # 0 to 100
    enrolled_at = Column(TIMESTAMP, default=utcnow)
    last_accessed_at = Column(TIMESTAMP, default=utcnow)
    completed_at = Column(TIMESTAMP)
    certificate_issued = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    completed_lessons = relationship(
        "CompletedLesson",
        order_by="CompletedLesson.completed_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    quiz_results = relationship(
        "QuizResult",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return (
            f"<CourseProgress(user_id={self.user_id}, course_id={self.course_id}, "
            f"progress={self.progress_percentage})>"
        )


class CompletedLesson(Base):
    """
    Completed lesson entries - the unique pair makes completion "add if absent"
    """
    __tablename__ = "completed_lessons"
    __table_args__ = (
        UniqueConstraint("progress_id", "lesson_id", name="uq_completed_progress_lesson"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    progress_id = Column(Uuid, ForeignKey("course_progress.id", ondelete="CASCADE"), nullable=False)
    lesson_id = Column(Uuid, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    completed_at = Column(TIMESTAMP, nullable=False, default=utcnow)


class QuizResult(Base):
    """
    Quiz result summary - attempt count and best score per quiz
    """
    __tablename__ = "quiz_results"
    __table_args__ = (
        UniqueConstraint("progress_id", "quiz_id", name="uq_result_progress_quiz"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    progress_id = Column(Uuid, ForeignKey("course_progress.id", ondelete="CASCADE"), nullable=False)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    best_score = Column(Float, nullable=False, default=0.0)
    passed = Column(Boolean, nullable=False, default=False)
