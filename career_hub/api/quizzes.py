"""
Quiz authoring, delivery and submission API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from career_hub.database import get_db
from career_hub.exceptions import CareerHubError
from career_hub.models import User
from career_hub.schemas.quiz import (
    AttemptSummary,
    GradedAnswer,
    LearnerQuizResponse,
    QuizAttemptOut,
    QuizCreate,
    QuizGradingResponse,
    QuizOut,
    QuizSubmission,
    QuizUpdate,
)
from career_hub.api.dependencies import get_current_user, require_admin
from career_hub.services.quiz_service import quiz_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


@router.get("/lesson/{lesson_id}")
async def get_quiz(
    lesson_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get the quiz of a lesson for the caller

    - Answer key is never included
    - Includes attempts used, the limit, and the caller's best score
    """
    data = quiz_service.get_for_lesson(db, user.id, lesson_id)
    return {"success": True, "data": LearnerQuizResponse(**data)}


@router.post("/{quiz_id}/submit")
async def submit_quiz(
    quiz_id: UUID,
    submission: QuizSubmission,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Submit and grade a quiz attempt

    Grading strategy:
    - multiple-choice / true-false: option id match
    - short-answer: case-insensitive, trimmed exact match

    Returns:
    - Attempt summary (score, percentage, pass flag, attempt number)
    - Per-question breakdown with correct answers and explanations
    - Whether another attempt is allowed
    """
    try:
        logger.info(f"Grading quiz {quiz_id} for user {user.id}")
        result = quiz_service.submit(
            db, user, quiz_id, submission.answers, submission.time_spent
        )
    except CareerHubError:
        raise
    except Exception as e:
        logger.error(f"Failed to grade quiz: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while submitting quiz")

    attempt = result.attempt
    return {
        "success": True,
        "message": (
            "Congratulations! You passed the quiz!" if attempt.passed
            else "Quiz completed. Review and try again!"
        ),
        "data": QuizGradingResponse(
            attempt=AttemptSummary(
                score=attempt.score,
                total_points=attempt.total_points,
                percentage=round(attempt.percentage, 1),
                passed=attempt.passed,
                attempt_number=attempt.attempt_number,
                max_attempts=result.max_attempts,
            ),
            answers=[GradedAnswer(**item) for item in result.grading.breakdown],
            can_retake=result.can_retake,
        ),
    }


@router.get("/{quiz_id}/attempts")
async def get_quiz_attempts(
    quiz_id: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The caller's attempts for a quiz, newest first"""
    attempts = quiz_service.list_attempts(db, user.id, quiz_id)
    return {
        "success": True,
        "count": len(attempts),
        "data": [QuizAttemptOut.model_validate(attempt) for attempt in attempts],
    }


@router.post("/lesson/{lesson_id}", status_code=201)
async def create_quiz(
    lesson_id: UUID,
    payload: QuizCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Author the quiz of a lesson; a lesson has at most one quiz"""
    try:
        quiz = quiz_service.create(db, lesson_id, payload.model_dump())
    except CareerHubError:
        raise
    except Exception as e:
        logger.error(f"Failed to create quiz: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while creating quiz")

    return {
        "success": True,
        "message": "Quiz created successfully",
        "data": QuizOut.model_validate(quiz),
    }


@router.put("/{quiz_id}")
async def update_quiz(
    quiz_id: UUID,
    payload: QuizUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        quiz = quiz_service.update(db, quiz_id, payload.model_dump(exclude_unset=True))
    except CareerHubError:
        raise
    except Exception as e:
        logger.error(f"Failed to update quiz: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while updating quiz")

    return {
        "success": True,
        "message": "Quiz updated successfully",
        "data": QuizOut.model_validate(quiz),
    }


@router.delete("/{quiz_id}")
async def delete_quiz(
    quiz_id: UUID,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        quiz_service.delete(db, quiz_id)
    except CareerHubError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete quiz: {str(e)}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while deleting quiz")

    return {"success": True, "message": "Quiz deleted successfully"}
