"""
Database models package
"""
from career_hub.models.user import User
from career_hub.models.course import Course, course_enrollments
from career_hub.models.lesson import Lesson
from career_hub.models.course_progress import CourseProgress, CompletedLesson, QuizResult
from career_hub.models.quiz import Quiz
from career_hub.models.quiz_attempt import QuizAttempt
from career_hub.models.certificate import Certificate

__all__ = [
    "User",
    "Course",
    "course_enrollments",
    "Lesson",
    "CourseProgress",
    "CompletedLesson",
    "QuizResult",
    "Quiz",
    "QuizAttempt",
    "Certificate",
]
