import unittest
from unittest import mock

from career_hub.database import SessionLocal
from career_hub.exceptions import NotFoundError, PreconditionError
from career_hub.models import (
    Certificate, CompletedLesson, Course, CourseProgress, QuizAttempt, QuizResult,
    course_enrollments,
)
from career_hub.services.progress_service import ProgressService, progress_service
from career_hub.services.quiz_service import quiz_service

from tests.helpers import DatabaseTestCase, choice_question, short_question

CERTIFICATE_ID_PATTERN = r"^CRH-\d{13}-[0-9A-Z]{9}$"


class CalculatePercentageTests(unittest.TestCase):
    def test_rounds_to_whole_percent(self) -> None:
        self.assertEqual(ProgressService.calculate_percentage(1, 3), 33)
        self.assertEqual(ProgressService.calculate_percentage(2, 3), 67)
        self.assertEqual(ProgressService.calculate_percentage(3, 3), 100)

    def test_no_published_lessons_is_zero(self) -> None:
        self.assertEqual(ProgressService.calculate_percentage(0, 0), 0)
        self.assertEqual(ProgressService.calculate_percentage(2, 0), 0)

    def test_never_exceeds_one_hundred(self) -> None:
        self.assertEqual(ProgressService.calculate_percentage(3, 2), 100)

    def test_halves_round_up(self) -> None:
        self.assertEqual(ProgressService.calculate_percentage(1, 8), 13)
        self.assertEqual(ProgressService.calculate_percentage(5, 8), 63)
        self.assertEqual(ProgressService.calculate_percentage(1, 200), 1)
        self.assertEqual(ProgressService.calculate_percentage(1, 2), 50)


class EnrollmentTests(DatabaseTestCase):
    def test_enroll_creates_progress_at_zero(self) -> None:
        course = self.make_course()

        progress_service.enroll(self.db, self.learner, course.id)

        self.db.expire_all()
        progress = progress_service.get_progress(self.db, self.learner.id, course.id)
        self.assertIsNotNone(progress)
        self.assertEqual(progress.progress_percentage, 0)
        self.assertEqual(progress.completed_lessons, [])
        self.assertIsNone(progress.completed_at)
        self.assertTrue(progress_service.is_enrolled(self.db, self.learner.id, course.id))
        self.assertEqual(course.total_enrollments, 1)
        self.assertEqual(self.templates_sent(), ["enrollment-confirmation"])

    def test_second_enrollment_is_rejected(self) -> None:
        course = self.make_course()
        progress_service.enroll(self.db, self.learner, course.id)

        with self.assertRaises(PreconditionError) as ctx:
            progress_service.enroll(self.db, self.learner, course.id)

        self.assertEqual(ctx.exception.message, "Already enrolled in this course")
        self.db.expire_all()
        self.assertEqual(course.total_enrollments, 1)
        self.assertEqual(self.db.query(CourseProgress).count(), 1)

    def test_unknown_course(self) -> None:
        course = self.make_course()
        course_id = course.id
        self.db.delete(course)
        self.db.commit()

        with self.assertRaises(NotFoundError):
            progress_service.enroll(self.db, self.learner, course_id)


class LessonCompletionTests(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.course = self.make_course()
        self.first = self.make_lesson(self.course, 1)
        self.second = self.make_lesson(self.course, 2)
        progress_service.enroll(self.db, self.learner, self.course.id)

    def test_progress_reaches_one_hundred_and_issues_one_certificate(self) -> None:
        result = progress_service.complete_lesson(self.db, self.learner, self.first.id)

        self.assertTrue(result.newly_completed)
        self.assertEqual(result.progress.progress_percentage, 50)
        self.assertFalse(result.course_completed)
        self.assertIsNone(result.certificate)

        result = progress_service.complete_lesson(self.db, self.learner, self.second.id)

        self.assertEqual(result.progress.progress_percentage, 100)
        self.assertTrue(result.course_completed)
        self.assertTrue(result.progress.certificate_issued)
        self.assertRegex(result.certificate.certificate_id, CERTIFICATE_ID_PATTERN)
        self.assertEqual(self.db.query(Certificate).count(), 1)
        self.assertEqual(
            self.templates_sent(),
            ["enrollment-confirmation", "lesson-completion", "course-completion"],
        )

    def test_completing_twice_changes_nothing(self) -> None:
        progress_service.complete_lesson(self.db, self.learner, self.first.id)
        progress_service.complete_lesson(self.db, self.learner, self.second.id)
        completed_at = progress_service.get_progress(self.db, self.learner.id, self.course.id).completed_at

        result = progress_service.complete_lesson(self.db, self.learner, self.second.id)

        self.assertFalse(result.newly_completed)
        self.assertIsNone(result.certificate)
        self.assertEqual(len(result.progress.completed_lessons), 2)
        self.assertEqual(result.progress.completed_at, completed_at)
        self.assertEqual(self.db.query(Certificate).count(), 1)
        self.assertEqual(self.templates_sent().count("course-completion"), 1)

    def test_published_lesson_count_is_read_live(self) -> None:
        progress_service.complete_lesson(self.db, self.learner, self.first.id)
        third = self.make_lesson(self.course, 3)

        result = progress_service.complete_lesson(self.db, self.learner, self.second.id)
        self.assertEqual(result.progress.progress_percentage, 67)

        result = progress_service.complete_lesson(self.db, self.learner, third.id)
        self.assertEqual(result.progress.progress_percentage, 100)

    def test_requires_enrollment(self) -> None:
        outsider = self.make_user("Out Sider", "out@example.com")

        with self.assertRaises(PreconditionError) as ctx:
            progress_service.complete_lesson(self.db, outsider, self.first.id)

        self.assertEqual(ctx.exception.message, "Course progress not found. Please enroll first.")

    def test_unpublished_lesson_is_rejected(self) -> None:
        draft = self.make_lesson(self.course, 3, status="draft")

        with self.assertRaises(PreconditionError):
            progress_service.complete_lesson(self.db, self.learner, draft.id)

    def test_unknown_lesson(self) -> None:
        lesson_id = self.first.id
        self.db.delete(self.first)
        self.db.commit()

        with self.assertRaises(NotFoundError):
            progress_service.complete_lesson(self.db, self.learner, lesson_id)


class QuizResultTests(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.course = self.make_course()
        self.lesson = self.make_lesson(self.course, 1)
        self.quiz = self.make_quiz(self.lesson, attempts=3)
        progress_service.enroll(self.db, self.learner, self.course.id)

    def _quiz_result(self) -> QuizResult:
        self.db.expire_all()
        return self.db.query(QuizResult).filter(QuizResult.quiz_id == self.quiz.id).one()

    def test_best_score_never_goes_down(self) -> None:
        quiz_service.submit(self.db, self.learner, self.quiz.id, ["opt-a"])
        quiz_service.submit(self.db, self.learner, self.quiz.id, ["opt-b"])

        result = self._quiz_result()
        self.assertEqual(result.attempts, 2)
        self.assertEqual(result.best_score, 100)
        self.assertTrue(result.passed)

    def test_better_attempt_raises_best_score(self) -> None:
        quiz_service.submit(self.db, self.learner, self.quiz.id, ["opt-b"])
        self.assertFalse(self._quiz_result().passed)

        quiz_service.submit(self.db, self.learner, self.quiz.id, ["opt-a"])

        result = self._quiz_result()
        self.assertEqual(result.best_score, 100)
        self.assertTrue(result.passed)

    def test_certificate_score_is_mean_of_best_scores(self) -> None:
        quiz_service.submit(self.db, self.learner, self.quiz.id, ["opt-a"])

        result = progress_service.complete_lesson(self.db, self.learner, self.lesson.id)

        self.assertEqual(result.certificate.score, 100)

    def test_certificate_score_rounds_half_up(self) -> None:
        # Two questions worth 1 point each: one right answer is 50%
        half_quiz = self.quiz
        half_quiz.questions = [choice_question(points=1), short_question(points=1)]
        # 3 points of 4: one right answer is 75%
        second_lesson = self.make_lesson(self.course, 2)
        three_quarter_quiz = self.make_quiz(
            second_lesson, questions=[choice_question(points=3), short_question(points=1)]
        )
        self.db.commit()

        quiz_service.submit(self.db, self.learner, half_quiz.id, ["opt-a", "wrong"])
        quiz_service.submit(self.db, self.learner, three_quarter_quiz.id, ["opt-a", "wrong"])
        progress_service.complete_lesson(self.db, self.learner, self.lesson.id)
        result = progress_service.complete_lesson(self.db, self.learner, second_lesson.id)

        self.assertEqual(sorted(r.best_score for r in result.progress.quiz_results), [50, 75])
        self.assertEqual(result.certificate.score, 63)


class ConcurrentWriteTests(DatabaseTestCase):
    """A second session commits the conflicting row between check and write"""

    def setUp(self) -> None:
        super().setUp()
        self.course = self.make_course()
        self.lesson = self.make_lesson(self.course, 1)
        self.make_lesson(self.course, 2)

    def test_duplicate_enrollment_hits_the_key(self) -> None:
        progress_service.enroll(self.db, self.learner, self.course.id)

        with mock.patch.object(progress_service, "is_enrolled", return_value=False):
            with self.assertRaises(PreconditionError) as ctx:
                progress_service.enroll(self.db, self.learner, self.course.id)

        self.assertEqual(ctx.exception.message, "Already enrolled in this course")
        self.db.expire_all()
        self.assertEqual(self.db.get(Course, self.course.id).total_enrollments, 1)
        self.assertEqual(len(self.db.execute(course_enrollments.select()).all()), 1)
        self.assertEqual(self.db.query(CourseProgress).count(), 1)
        self.assertEqual(self.templates_sent(), ["enrollment-confirmation"])

    def test_lesson_completed_by_another_request_is_a_no_op(self) -> None:
        progress_service.enroll(self.db, self.learner, self.course.id)

        racing = SessionLocal()
        self.addCleanup(racing.close)
        stale = progress_service.get_progress(racing, self.learner.id, self.course.id)
        self.assertEqual(stale.completed_lessons, [])

        self.db.add(CompletedLesson(progress_id=stale.id, lesson_id=self.lesson.id))
        self.db.commit()

        result = progress_service.complete_lesson(racing, self.learner, self.lesson.id)

        self.assertFalse(result.newly_completed)
        self.assertIsNone(result.certificate)
        self.assertEqual([entry.lesson_id for entry in result.progress.completed_lessons], [self.lesson.id])
        self.assertEqual(self.db.query(CompletedLesson).count(), 1)
        self.assertNotIn("lesson-completion", self.templates_sent())

    def test_colliding_attempt_number_is_rejected(self) -> None:
        progress_service.enroll(self.db, self.learner, self.course.id)
        quiz = self.make_quiz(self.lesson, attempts=3)
        quiz_service.submit(self.db, self.learner, quiz.id, ["opt-a"])

        with mock.patch.object(quiz_service, "count_attempts", return_value=0):
            with self.assertRaises(PreconditionError) as ctx:
                quiz_service.submit(self.db, self.learner, quiz.id, ["opt-b"])

        self.assertIn("Please retry", ctx.exception.message)
        self.db.expire_all()
        self.assertEqual(self.db.query(QuizAttempt).count(), 1)
        result = self.db.query(QuizResult).one()
        self.assertEqual(result.attempts, 1)
        self.assertEqual(result.best_score, 100)
        self.assertEqual(self.templates_sent().count("quiz-result"), 1)


if __name__ == "__main__":
    unittest.main()
