"""
Lesson management and completion API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from career_hub.database import get_db
from career_hub.exceptions import CareerHubError, ForbiddenError, NotFoundError, PreconditionError
from career_hub.models import CompletedLesson, Course, Lesson, Quiz, QuizAttempt, QuizResult, User
from career_hub.schemas.lesson import LessonCreate, LessonUpdate, LessonOut, LessonCompletionResponse
from career_hub.api.dependencies import get_current_user, require_admin
from career_hub.services.progress_service import progress_service

router = APIRouter(prefix="/api/lessons", tags=["lessons"])
logger = logging.getLogger(__name__)


def _check_access(db: Session, user: User, course_id: UUID) -> None:
    if not user.is_admin and not progress_service.is_enrolled(db, user.id, course_id):
        raise ForbiddenError("Not enrolled in this course")


@router.get("/course/{course_id}")
async def get_lessons(
    course_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Published lessons of a course, for enrolled users and admins"""
    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")

    _check_access(db, user, course_id)

    lessons = (
        db.query(Lesson)
        .filter(Lesson.course_id == course_id, Lesson.status == "published")
        .order_by(Lesson.order)
        .all()
    )
    return {
        "success": True,
        "count": len(lessons),
        "data": [LessonOut.model_validate(lesson) for lesson in lessons],
    }


@router.get("/{lesson_id}")
async def get_lesson(
    lesson_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    lesson = db.get(Lesson, lesson_id)
    if not lesson:
        raise NotFoundError("Lesson not found")

    _check_access(db, user, lesson.course_id)
    return {"success": True, "data": LessonOut.model_validate(lesson)}


@router.post("/course/{course_id}", status_code=201)
async def create_lesson(
    course_id: UUID,
    payload: LessonCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")

    try:
        lesson = Lesson(course_id=course_id, **payload.model_dump())
        db.add(lesson)
        db.commit()
        db.refresh(lesson)
    except IntegrityError:
        db.rollback()
        raise PreconditionError(f"A lesson with order {payload.order} already exists in this course")
    except Exception as e:
        logger.error(f"Failed to create lesson: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while creating lesson")

    logger.info(f"Lesson created: {lesson.id} (course {course_id}, order {lesson.order})")
    return {
        "success": True,
        "message": "Lesson created successfully",
        "data": LessonOut.model_validate(lesson),
    }


@router.put("/{lesson_id}")
async def update_lesson(
    lesson_id: UUID,
    payload: LessonUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Update a lesson

    Publishing or unpublishing changes the denominator of every learner's
    progress from their next completion on.
    """
    lesson = db.get(Lesson, lesson_id)
    if not lesson:
        raise NotFoundError("Lesson not found")

    try:
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(lesson, key, value)
        db.commit()
        db.refresh(lesson)
    except IntegrityError:
        db.rollback()
        order = payload.order if payload.order is not None else lesson.order
        raise PreconditionError(f"A lesson with order {order} already exists in this course")
    except Exception as e:
        logger.error(f"Failed to update lesson: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while updating lesson")

    return {
        "success": True,
        "message": "Lesson updated successfully",
        "data": LessonOut.model_validate(lesson),
    }


@router.delete("/{lesson_id}")
async def delete_lesson(
    lesson_id: UUID,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a lesson together with its quiz and completion entries"""
    lesson = db.get(Lesson, lesson_id)
    if not lesson:
        raise NotFoundError("Lesson not found")

    try:
        quiz_ids = select(Quiz.id).where(Quiz.lesson_id == lesson_id)
        db.execute(delete(QuizResult).where(QuizResult.quiz_id.in_(quiz_ids)))
        db.execute(delete(QuizAttempt).where(QuizAttempt.lesson_id == lesson_id))
        db.execute(delete(Quiz).where(Quiz.lesson_id == lesson_id))
        db.execute(delete(CompletedLesson).where(CompletedLesson.lesson_id == lesson_id))
        db.delete(lesson)
        db.commit()
    except Exception as e:
        logger.error(f"Failed to delete lesson: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while deleting lesson")

    logger.info(f"Lesson deleted: {lesson_id}")
    return {"success": True, "message": "Lesson deleted successfully"}


@router.post("/{lesson_id}/complete")
async def complete_lesson(
    lesson_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Mark a lesson as completed

    - Idempotent per (user, lesson)
    - Recomputes progress against the live published lesson count
    - At 100%, issues the certificate in the same transaction
    """
    try:
        result = progress_service.complete_lesson(db, user, lesson_id)
    except CareerHubError:
        raise
    except Exception as e:
        logger.error(f"Failed to complete lesson: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while completing lesson")

    progress = result.progress
    if result.certificate is not None:
        message = "Lesson marked as completed. Course completed, certificate issued!"
    elif result.newly_completed:
        message = "Lesson marked as completed"
    else:
        message = "Lesson already completed"

    return {
        "success": True,
        "message": message,
        "data": LessonCompletionResponse(
            progress=progress.progress_percentage,
            completed_lessons=len(progress.completed_lessons),
            course_completed=result.course_completed,
            certificate_id=result.certificate.certificate_id if result.certificate else None,
        ),
    }
