"""
Pydantic schemas for lesson-related requests and responses
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from uuid import UUID
from datetime import datetime

LessonType = Literal["video", "text", "mixed"]
LessonStatus = Literal["draft", "published"]


class LessonContent(BaseModel):
    text: Optional[str] = None
    video_url: Optional[str] = None
    video_duration: Optional[int] = Field(None, ge=0, description="Video length in minutes")


class LessonResource(BaseModel):
    title: str
    url: str
    type: Optional[str] = None  # pdf, doc, link


class LessonCreate(BaseModel):
    """Schema for adding a lesson to a course"""
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    order: int = Field(..., ge=1, description="Position within the course")
    type: LessonType
    content: LessonContent = LessonContent()
    resources: List[LessonResource] = []
    duration: int = Field(..., ge=0, description="Duration in minutes")
    is_free: bool = False
    status: LessonStatus = "draft"


class LessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    order: Optional[int] = Field(None, ge=1)
    type: Optional[LessonType] = None
    content: Optional[LessonContent] = None
    resources: Optional[List[LessonResource]] = None
    duration: Optional[int] = Field(None, ge=0)
    is_free: Optional[bool] = None
    status: Optional[LessonStatus] = None


class LessonOut(BaseModel):
    id: UUID
    course_id: UUID
    title: str
    description: Optional[str] = None
    order: int
    type: str
    content: Optional[LessonContent] = None
    resources: List[LessonResource] = []
    duration: int
    is_free: bool
    status: str

    class Config:
        from_attributes = True


class LessonCompletionResponse(BaseModel):
    """Snapshot returned after completing a lesson"""
    progress: int
    completed_lessons: int
    course_completed: bool
    certificate_id: Optional[str] = None
