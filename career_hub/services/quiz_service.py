"""
Quiz delivery and submission workflow
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from career_hub.exceptions import NotFoundError, PreconditionError
from career_hub.models import Course, Lesson, Quiz, QuizAttempt, QuizResult, User
from career_hub.models.types import utcnow
from career_hub.services.grading_service import grading_service, GradingResult
from career_hub.services.notification_service import notification_service
from career_hub.services.progress_service import progress_service
from career_hub.utils.cache import cache_service

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    attempt: QuizAttempt
    grading: GradingResult
    max_attempts: int

    @property
    def can_retake(self) -> bool:
        return self.attempt.attempt_number < self.max_attempts


class QuizService:
    """Service for serving quizzes to learners and grading their attempts"""

    @staticmethod
    def learner_view(quiz: Quiz) -> Dict[str, Any]:
        """Quiz payload with the answer key removed"""
        return {
            "id": str(quiz.id),
            "lesson_id": str(quiz.lesson_id),
            "course_id": str(quiz.course_id),
            "title": quiz.title,
            "description": quiz.description,
            "passing_score": quiz.passing_score,
            "time_limit": quiz.time_limit,
            "questions": [
                {
                    "id": q.get("id"),
                    "question": q.get("question"),
                    "type": q.get("type"),
                    "options": [
                        {"id": opt.get("id"), "text": opt.get("text")}
                        for opt in q.get("options", [])
                    ],
                    "points": q.get("points", 1),
                }
                for q in quiz.questions
            ],
        }

    def count_attempts(self, db: Session, user_id: UUID, quiz_id: UUID) -> int:
        return db.query(func.count(QuizAttempt.id)).filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id == quiz_id
        ).scalar()

    def get_for_lesson(self, db: Session, user_id: UUID, lesson_id: UUID) -> Dict[str, Any]:
        """
        Quiz of a lesson as seen by a learner, with their attempt status

        The stripped quiz payload is cached; attempt data is always fresh.
        """
        lesson = db.get(Lesson, lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found")

        cache_key = cache_service.generate_cache_key(str(lesson_id))
        quiz_data = cache_service.get(cache_key)

        if quiz_data is None:
            quiz = db.query(Quiz).filter(Quiz.lesson_id == lesson_id).first()
            if not quiz:
                raise NotFoundError("No quiz found for this lesson")
            quiz_data = self.learner_view(quiz)
            cache_service.set(cache_key, quiz_data)

        quiz_id = UUID(quiz_data["id"])
        attempts = db.query(QuizAttempt.percentage).filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id == quiz_id
        ).all()
        max_attempts = db.query(Quiz.attempts).filter(Quiz.id == quiz_id).scalar() or 0

        return {
            "quiz": quiz_data,
            "attempts": len(attempts),
            "max_attempts": max_attempts,
            "can_retake": len(attempts) < max_attempts,
            "best_score": max((a.percentage for a in attempts), default=None),
        }

    def submit(
        self,
        db: Session,
        user: User,
        quiz_id: UUID,
        answers: Union[List[Any], Dict[str, Any]],
        time_spent: int = 0
    ) -> SubmissionResult:
        """
        Grade and record a quiz attempt

        Raises:
            NotFoundError: quiz does not exist
            PreconditionError: attempts exhausted, ungradable quiz, or a
                concurrent submission took the same attempt number
        """
        quiz = db.get(Quiz, quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")

        previous_attempts = self.count_attempts(db, user.id, quiz.id)
        if previous_attempts >= quiz.attempts:
            raise PreconditionError(f"Maximum attempts ({quiz.attempts}) reached for this quiz")

        grading = grading_service.grade_quiz(quiz.questions, answers, quiz.passing_score)
        attempt_number = previous_attempts + 1
        now = utcnow()

        attempt = QuizAttempt(
            quiz_id=quiz.id,
            user_id=user.id,
            course_id=quiz.course_id,
            lesson_id=quiz.lesson_id,
            answers=grading.breakdown,
            score=grading.score,
            total_points=grading.total_points,
            percentage=grading.percentage,
            passed=grading.passed,
            attempt_number=attempt_number,
            time_spent=time_spent or 0,
            started_at=now,
            completed_at=now,
        )
        db.add(attempt)

        progress = progress_service.get_progress(db, user.id, quiz.course_id)
        if progress is not None:
            progress_service.record_quiz_result(
                db, progress, quiz.id, attempt_number, grading.percentage, grading.passed
            )

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(f"Concurrent submission for quiz {quiz.id} by user {user.id}")
            raise PreconditionError(
                "Another submission for this quiz was recorded at the same time. Please retry."
            )

        db.refresh(attempt)
        logger.info(
            f"Quiz attempt saved: {attempt.id}, attempt {attempt_number}/{quiz.attempts}, "
            f"{grading.percentage:.1f}%"
        )

        lesson = db.get(Lesson, quiz.lesson_id)
        course = db.get(Course, quiz.course_id)
        notification_service.notify_quiz_result(user, quiz, attempt, lesson, course)

        return SubmissionResult(attempt=attempt, grading=grading, max_attempts=quiz.attempts)

    def list_attempts(self, db: Session, user_id: UUID, quiz_id: UUID) -> List[QuizAttempt]:
        return db.query(QuizAttempt).filter(
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.user_id == user_id
        ).order_by(QuizAttempt.attempt_number.desc()).all()

    def create(self, db: Session, lesson_id: UUID, data: Dict[str, Any]) -> Quiz:
        lesson = db.get(Lesson, lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found")

        existing = db.query(Quiz.id).filter(Quiz.lesson_id == lesson_id).first()
        if existing:
            raise PreconditionError("Quiz already exists for this lesson")

        quiz = Quiz(lesson_id=lesson.id, course_id=lesson.course_id, **data)
        db.add(quiz)
        db.commit()
        db.refresh(quiz)

        cache_service.delete(cache_service.generate_cache_key(str(lesson_id)))
        logger.info(f"Quiz created: {quiz.id} for lesson {lesson_id}")
        return quiz

    def update(self, db: Session, quiz_id: UUID, data: Dict[str, Any]) -> Quiz:
        quiz = db.get(Quiz, quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")

        for key, value in data.items():
            setattr(quiz, key, value)
        db.commit()
        db.refresh(quiz)

        cache_service.delete(cache_service.generate_cache_key(str(quiz.lesson_id)))
        logger.info(f"Quiz updated: {quiz.id}")
        return quiz

    def delete(self, db: Session, quiz_id: UUID) -> None:
        quiz = db.get(Quiz, quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")

        lesson_id = quiz.lesson_id
        db.query(QuizResult).filter(QuizResult.quiz_id == quiz.id).delete(synchronize_session=False)
        db.query(QuizAttempt).filter(QuizAttempt.quiz_id == quiz.id).delete(synchronize_session=False)
        db.delete(quiz)
        db.commit()

        cache_service.delete(cache_service.generate_cache_key(str(lesson_id)))
        logger.info(f"Quiz deleted: {quiz_id}")


# Global instance
quiz_service = QuizService()
