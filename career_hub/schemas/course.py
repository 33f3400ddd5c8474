"""
Pydantic schemas for course-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from uuid import UUID
from datetime import datetime

from career_hub.schemas.lesson import LessonOut

CourseCategory = Literal["technology", "business", "design", "marketing", "personal-development", "other"]
CourseLevel = Literal["beginner", "intermediate", "advanced"]
CourseStatus = Literal["draft", "published", "archived"]


class CourseCreate(BaseModel):
    """Schema for creating a course (always starts as draft)"""
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    category: CourseCategory
    level: CourseLevel
    duration: float = Field(..., gt=0, description="Duration in hours")
    price: float = Field(0, ge=0)
    is_paid: bool = False
    thumbnail: str = ""
    tags: List[str] = []
    prerequisites: List[str] = []
    learning_outcomes: List[str] = []


class CourseUpdate(BaseModel):
    """Partial course update, admin only"""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    category: Optional[CourseCategory] = None
    level: Optional[CourseLevel] = None
    duration: Optional[float] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)
    is_paid: Optional[bool] = None
    thumbnail: Optional[str] = None
    tags: Optional[List[str]] = None
    prerequisites: Optional[List[str]] = None
    learning_outcomes: Optional[List[str]] = None
    status: Optional[CourseStatus] = None


class InstructorSummary(BaseModel):
    id: UUID
    name: str
    email: str

    class Config:
        from_attributes = True


class CourseOut(BaseModel):
    """Course as returned by the API"""
    id: UUID
    title: str
    description: str
    category: str
    level: str
    thumbnail: Optional[str] = ""
    instructor: Optional[InstructorSummary] = None
    duration: float
    price: float
    is_paid: bool
    tags: List[str] = []
    prerequisites: List[str] = []
    learning_outcomes: List[str] = []
    status: str
    total_enrollments: int
    rating: float
    total_ratings: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CourseDetail(CourseOut):
    """Course with its published lessons in order"""
    lessons: List[LessonOut] = []


class MyCourse(CourseOut):
    """Enrolled course with the caller's progress"""
    progress: int = 0
    last_accessed: Optional[datetime] = None
