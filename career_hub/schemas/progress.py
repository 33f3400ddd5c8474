"""
Pydantic schemas for course progress
"""
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class CompletedLessonOut(BaseModel):
    lesson_id: UUID
    completed_at: datetime

    class Config:
        from_attributes = True


class QuizResultOut(BaseModel):
    quiz_id: UUID
    attempts: int
    best_score: float
    passed: bool

    class Config:
        from_attributes = True


class ProgressOut(BaseModel):
    """A learner's progress record for one course"""
    id: UUID
    user_id: UUID
    course_id: UUID
    progress_percentage: int
    completed_lessons: List[CompletedLessonOut]
    quiz_results: List[QuizResultOut]
    enrolled_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    certificate_issued: bool

    class Config:
        from_attributes = True
