"""
Pydantic schemas for certificates
"""
from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


class CertificateCourse(BaseModel):
    id: UUID
    title: str
    category: str
    duration: float

    class Config:
        from_attributes = True


class CertificateHolder(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class CertificateOut(BaseModel):
    id: UUID
    certificate_id: str
    user: Optional[CertificateHolder] = None
    course: Optional[CertificateCourse] = None
    issued_at: datetime
    completion_date: datetime
    score: Optional[int] = None
    verification_url: Optional[str] = None
    pdf_url: Optional[str] = None

    class Config:
        from_attributes = True


class CertificateVerification(BaseModel):
    """Public projection returned by certificate verification"""
    certificate_id: str
    user_name: str
    course_name: str
    issued_at: datetime
    completion_date: datetime


class ReconcileResponse(BaseModel):
    certificates_issued: int
    flags_repaired: int
