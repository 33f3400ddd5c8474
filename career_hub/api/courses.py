"""
Course catalog, enrollment and progress API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import math
import logging

from career_hub.database import get_db
from career_hub.exceptions import CareerHubError, NotFoundError
from career_hub.models import (
    Certificate, CompletedLesson, Course, CourseProgress, Lesson, Quiz, QuizAttempt,
    QuizResult, User, course_enrollments,
)
from career_hub.schemas.course import CourseCreate, CourseUpdate, CourseOut, CourseDetail, MyCourse
from career_hub.schemas.certificate import CertificateOut
from career_hub.schemas.lesson import LessonOut
from career_hub.schemas.progress import ProgressOut
from career_hub.api.dependencies import get_current_user, get_optional_user, require_admin
from career_hub.services.certificate_service import certificate_service
from career_hub.services.notification_service import notification_service
from career_hub.services.progress_service import progress_service

router = APIRouter(prefix="/api/courses", tags=["courses"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_courses(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = None,
    level: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    List courses with pagination and filters

    - Learners and anonymous callers only see published courses
    - Admins see everything, or a single status when `status` is given
    - `search` matches title or description, case-insensitive
    """
    query = db.query(Course)

    if user is not None and user.is_admin:
        if status:
            query = query.filter(Course.status == status)
    else:
        query = query.filter(Course.status == "published")

    if category:
        query = query.filter(Course.category == category)
    if level:
        query = query.filter(Course.level == level)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))

    total = query.count()
    courses = (
        query.order_by(Course.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "success": True,
        "count": len(courses),
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit),
        "data": [CourseOut.model_validate(course) for course in courses],
    }


@router.get("/my/courses")
async def get_my_courses(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Courses the caller is enrolled in, with progress and last access"""
    courses = (
        db.query(Course)
        .join(course_enrollments, course_enrollments.c.course_id == Course.id)
        .filter(course_enrollments.c.user_id == user.id)
        .order_by(course_enrollments.c.enrolled_at.desc())
        .all()
    )
    progress_by_course = {
        p.course_id: p
        for p in db.query(CourseProgress).filter(CourseProgress.user_id == user.id).all()
    }

    data = []
    for course in courses:
        progress = progress_by_course.get(course.id)
        item = MyCourse.model_validate(course)
        item.progress = progress.progress_percentage if progress else 0
        item.last_accessed = progress.last_accessed_at if progress else None
        data.append(item)

    return {"success": True, "count": len(data), "data": data}


@router.get("/{course_id}")
async def get_course(course_id: UUID, db: Session = Depends(get_db)):
    """Get one course with its published lessons in order"""
    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")

    lessons = (
        db.query(Lesson)
        .filter(Lesson.course_id == course_id, Lesson.status == "published")
        .order_by(Lesson.order)
        .all()
    )

    detail = CourseDetail.model_validate(course)
    detail.lessons = [LessonOut.model_validate(lesson) for lesson in lessons]
    return {"success": True, "data": detail}


@router.post("", status_code=201)
async def create_course(
    payload: CourseCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a course as draft with the caller as instructor"""
    try:
        course = Course(**payload.model_dump(), instructor_id=admin.id, status="draft")
        db.add(course)
        db.commit()
        db.refresh(course)

        logger.info(f"Course created: {course.id}")
        return {
            "success": True,
            "message": "Course created successfully",
            "data": CourseOut.model_validate(course),
        }
    except Exception as e:
        logger.error(f"Failed to create course: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while creating course")


@router.put("/{course_id}")
async def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")

    try:
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(course, key, value)
        db.commit()
        db.refresh(course)

        logger.info(f"Course updated: {course.id}")
        return {
            "success": True,
            "message": "Course updated successfully",
            "data": CourseOut.model_validate(course),
        }
    except Exception as e:
        logger.error(f"Failed to update course: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while updating course")


@router.put("/{course_id}/publish")
async def publish_course(
    course_id: UUID,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Publish a course and notify every subscribed learner"""
    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")

    try:
        course.status = "published"
        db.commit()
        db.refresh(course)
    except Exception as e:
        logger.error(f"Failed to publish course: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while publishing course")

    subscribers = db.query(User).filter(
        User.role == "user",
        User.is_active.is_(True),
        User.notify_new_courses.is_(True)
    ).all()
    queued = notification_service.notify_course_published(subscribers, course)
    logger.info(f"Course published: {course.id}, {queued}/{len(subscribers)} notifications queued")

    return {
        "success": True,
        "message": "Course published successfully",
        "data": CourseOut.model_validate(course),
    }


@router.delete("/{course_id}")
async def delete_course(
    course_id: UUID,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a course with its lessons, quizzes and learner records"""
    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")

    try:
        progress_ids = select(CourseProgress.id).where(CourseProgress.course_id == course_id)
        db.execute(delete(QuizResult).where(QuizResult.progress_id.in_(progress_ids)))
        db.execute(delete(CompletedLesson).where(CompletedLesson.progress_id.in_(progress_ids)))
        db.execute(delete(QuizAttempt).where(QuizAttempt.course_id == course_id))
        db.execute(delete(Certificate).where(Certificate.course_id == course_id))
        db.execute(delete(CourseProgress).where(CourseProgress.course_id == course_id))
        db.execute(delete(Quiz).where(Quiz.course_id == course_id))
        db.execute(delete(Lesson).where(Lesson.course_id == course_id))
        db.execute(delete(course_enrollments).where(course_enrollments.c.course_id == course_id))
        db.delete(course)
        db.commit()

        logger.info(f"Course deleted: {course_id}")
        return {"success": True, "message": "Course deleted successfully"}
    except Exception as e:
        logger.error(f"Failed to delete course: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while deleting course")


@router.post("/{course_id}/enroll")
async def enroll_course(
    course_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Enroll the caller in a course

    - Adds the caller to the enrolled list and bumps the counter
    - Creates a progress record at 0%
    - Queues an enrollment confirmation email
    """
    try:
        course = progress_service.enroll(db, user, course_id)
        return {
            "success": True,
            "message": "Successfully enrolled in course",
            "data": CourseOut.model_validate(course),
        }
    except CareerHubError:
        raise
    except Exception as e:
        logger.error(f"Failed to enroll in course: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while enrolling in course")


@router.get("/{course_id}/progress")
async def get_course_progress(
    course_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The caller's progress record for a course"""
    progress = progress_service.get_progress(db, user.id, course_id)
    if not progress:
        raise NotFoundError("Course progress not found. Please enroll first.")

    return {"success": True, "data": ProgressOut.model_validate(progress)}


@router.post("/{course_id}/certificate")
async def generate_certificate(
    course_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Issue the caller's certificate for a fully completed course

    Returns the existing certificate when one was already issued.
    """
    try:
        certificate, existed = certificate_service.generate_for_user(db, user.id, course_id)
        return {
            "success": True,
            "message": "Certificate already generated" if existed else "Certificate generated successfully",
            "data": CertificateOut.model_validate(certificate),
        }
    except CareerHubError:
        raise
    except Exception as e:
        logger.error(f"Failed to generate certificate: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while generating certificate")
