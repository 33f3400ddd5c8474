import unittest
from typing import Any, Dict, List
from unittest import mock

from career_hub.database import Base, SessionLocal, engine
from career_hub.models import Course, Lesson, Quiz, User
from career_hub.api.dependencies import create_access_token
from career_hub.services.notification_service import notification_service
from career_hub.utils.rate_limiter import rate_limiter


def choice_question(text: str = "Pick the right one", points: float = 10) -> Dict[str, Any]:
    return {
        "id": "q1",
        "question": text,
        "type": "multiple-choice",
        "options": [
            {"id": "opt-a", "text": "Right", "is_correct": True},
            {"id": "opt-b", "text": "Wrong", "is_correct": False},
        ],
        "points": points,
        "explanation": "Right is right.",
    }


def short_question(answer: str = "Python", points: float = 5) -> Dict[str, Any]:
    return {
        "id": "q2",
        "question": "Which language?",
        "type": "short-answer",
        "options": [],
        "correct_answer": answer,
        "points": points,
    }


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema per test, notifications captured instead of sent"""

    def setUp(self) -> None:
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        rate_limiter.reset()

        self.db = SessionLocal()
        self.addCleanup(self.db.close)

        self.notifications: List[Dict[str, Any]] = []
        patcher = mock.patch.object(notification_service, "enqueue", side_effect=self._record_notification)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.admin = self.make_user("Ada Admin", "admin@example.com", role="admin")
        self.learner = self.make_user("Lee Learner", "lee@example.com")

    def _record_notification(self, recipient: str, template: str, variables: Dict[str, Any]) -> bool:
        self.notifications.append({"recipient": recipient, "template": template, "variables": variables})
        return True

    def templates_sent(self) -> List[str]:
        return [n["template"] for n in self.notifications]

    def make_user(self, name: str, email: str, role: str = "user") -> User:
        user = User(name=name, email=email, role=role)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def auth(self, user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}

    def make_course(self, title: str = "Intro to Careers", status: str = "published") -> Course:
        course = Course(
            title=title,
            description="Find the job you want.",
            category="business",
            level="beginner",
            duration=4,
            instructor_id=self.admin.id,
            status=status,
        )
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        return course

    def make_lesson(self, course: Course, order: int, status: str = "published") -> Lesson:
        lesson = Lesson(
            course_id=course.id,
            title=f"Lesson {order}",
            order=order,
            type="text",
            content={"text": "Read me"},
            duration=15,
            status=status,
        )
        self.db.add(lesson)
        self.db.commit()
        self.db.refresh(lesson)
        return lesson

    def make_quiz(
        self,
        lesson: Lesson,
        questions: List[Dict[str, Any]] = None,
        attempts: int = 3,
        passing_score: float = 70,
    ) -> Quiz:
        quiz = Quiz(
            lesson_id=lesson.id,
            course_id=lesson.course_id,
            title="Check yourself",
            questions=questions or [choice_question()],
            attempts=attempts,
            passing_score=passing_score,
        )
        self.db.add(quiz)
        self.db.commit()
        self.db.refresh(quiz)
        return quiz
