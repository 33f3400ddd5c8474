"""
Enrollment and lesson completion tracking
"""
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from career_hub.exceptions import NotFoundError, PreconditionError
from career_hub.models import (
    Certificate, CompletedLesson, Course, CourseProgress, Lesson, QuizResult, User,
    course_enrollments,
)
from career_hub.models.types import utcnow
from career_hub.services.certificate_service import certificate_service
from career_hub.services.notification_service import notification_service
from career_hub.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class CompletionResult:
    """Outcome of a lesson completion request"""
    progress: CourseProgress
    newly_completed: bool
    certificate: Optional[Certificate] = None

    @property
    def course_completed(self) -> bool:
        return self.progress.completed_at is not None


class ProgressService:
    """
    Service for the enrollment -> completion -> certificate workflow

    Progress percentage = round_half_up(100 * completed lessons / published lessons),
    where the published lesson count is read live at every completion.
    """

    @staticmethod
    def calculate_percentage(completed: int, published: int) -> int:
        """
        Progress percentage, capped at 100

        A course without published lessons reports 0.
        """
        if published <= 0:
            return 0
        return min(round_half_up(completed * 100 / published), 100)

    def get_progress(self, db: Session, user_id: UUID, course_id: UUID) -> Optional[CourseProgress]:
        return db.query(CourseProgress).filter(
            CourseProgress.user_id == user_id,
            CourseProgress.course_id == course_id
        ).first()

    def is_enrolled(self, db: Session, user_id: UUID, course_id: UUID) -> bool:
        row = db.execute(
            select(course_enrollments.c.user_id).where(
                course_enrollments.c.course_id == course_id,
                course_enrollments.c.user_id == user_id,
            )
        ).first()
        return row is not None

    def enroll(self, db: Session, user: User, course_id: UUID) -> Course:
        """
        Enroll a user in a course

        Adds the user to the enrolled list, bumps the enrollment counter and
        creates the progress record in a single transaction.

        Raises:
            NotFoundError: course does not exist
            PreconditionError: user is already enrolled
        """
        course = db.get(Course, course_id)
        if not course:
            raise NotFoundError("Course not found")

        if self.is_enrolled(db, user.id, course.id):
            raise PreconditionError("Already enrolled in this course")

        now = utcnow()
        try:
            # The composite key rejects a concurrent duplicate of this insert
            db.execute(
                insert(course_enrollments).values(course_id=course.id, user_id=user.id, enrolled_at=now)
            )
            db.execute(
                update(Course)
                .where(Course.id == course.id)
                .values(total_enrollments=Course.total_enrollments + 1)
            )

            progress = self.get_progress(db, user.id, course.id)
            if progress is None:
                db.add(CourseProgress(
                    user_id=user.id,
                    course_id=course.id,
                    progress_percentage=0,
                    enrolled_at=now,
                    last_accessed_at=now,
                ))
            else:
                # Left over from an earlier enrollment; keep the learner's history
                logger.warning(f"Reusing existing progress record {progress.id} for re-enrollment")

            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(f"Concurrent enrollment of user {user.id} in course {course_id}")
            raise PreconditionError("Already enrolled in this course")

        db.refresh(course)
        logger.info(f"User {user.id} enrolled in course {course.id}")

        notification_service.notify_enrollment(user, course)
        return course

    def complete_lesson(self, db: Session, user: User, lesson_id: UUID) -> CompletionResult:
        """
        Mark a lesson completed for a user

        Idempotent: completing a lesson twice returns the current snapshot
        without writing. Reaching 100% sets completed_at once and issues the
        certificate in the same transaction.

        Raises:
            NotFoundError: lesson does not exist
            PreconditionError: lesson not published, or user not enrolled
        """
        lesson = db.get(Lesson, lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found")

        if lesson.status != "published":
            raise PreconditionError("Lesson is not published yet")

        progress = self.get_progress(db, user.id, lesson.course_id)
        if not progress:
            raise PreconditionError("Course progress not found. Please enroll first.")

        if any(entry.lesson_id == lesson.id for entry in progress.completed_lessons):
            return CompletionResult(progress=progress, newly_completed=False)

        now = utcnow()
        progress.completed_lessons.append(
            CompletedLesson(lesson_id=lesson.id, completed_at=now)
        )

        try:
            db.flush()
        except IntegrityError:
            # A concurrent request recorded this lesson first
            db.rollback()
            progress = self.get_progress(db, user.id, lesson.course_id)
            return CompletionResult(progress=progress, newly_completed=False)

        published = db.query(func.count(Lesson.id)).filter(
            Lesson.course_id == lesson.course_id,
            Lesson.status == "published"
        ).scalar()

        progress.progress_percentage = self.calculate_percentage(
            len(progress.completed_lessons), published
        )
        progress.last_accessed_at = now

        course = db.get(Course, lesson.course_id)
        certificate = None

        if progress.progress_percentage == 100 and progress.completed_at is None:
            progress.completed_at = now
            certificate = certificate_service.issue(
                db,
                user.id,
                course,
                completion_date=now,
                progress=progress,
                commit=False,
            )

        db.commit()
        db.refresh(progress)

        logger.info(
            f"Lesson {lesson.id} completed by user {user.id}: "
            f"{len(progress.completed_lessons)}/{published} lessons, "
            f"{progress.progress_percentage}%"
        )

        if certificate is not None:
            db.refresh(certificate)
            notification_service.notify_course_completion(user, course, certificate)
        else:
            notification_service.notify_lesson_completion(user, lesson, course, progress)

        return CompletionResult(progress=progress, newly_completed=True, certificate=certificate)

    def record_quiz_result(
        self,
        db: Session,
        progress: CourseProgress,
        quiz_id: UUID,
        attempt_number: int,
        percentage: float,
        passed: bool
    ) -> None:
        """
        Fold a graded attempt into the progress record

        The attempt count follows the attempt number; best score and pass flag
        only move when the new percentage beats the stored best. Both are
        single UPDATE statements so concurrent submissions cannot regress them.
        The caller commits.
        """
        result = db.query(QuizResult).filter(
            QuizResult.progress_id == progress.id,
            QuizResult.quiz_id == quiz_id
        ).first()

        if result is None:
            progress.quiz_results.append(QuizResult(
                quiz_id=quiz_id,
                attempts=attempt_number,
                best_score=percentage,
                passed=passed,
            ))
            return

        db.execute(
            update(QuizResult)
            .where(QuizResult.id == result.id, QuizResult.attempts < attempt_number)
            .values(attempts=attempt_number)
        )
        db.execute(
            update(QuizResult)
            .where(QuizResult.id == result.id, QuizResult.best_score < percentage)
            .values(best_score=percentage, passed=passed)
        )


# Global instance
progress_service = ProgressService()
