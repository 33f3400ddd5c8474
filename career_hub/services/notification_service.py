"""
Notification dispatch
Requests enqueue, a background worker delivers with retry and backoff
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from career_hub.config import settings
from career_hub.services.email_service import email_service

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    recipient: str
    template: str
    variables: Dict[str, Any] = field(default_factory=dict)


class NotificationService:
    """
    Bounded work queue for outbound email

    - enqueue() never blocks and never raises; a full or stopped queue
      dead-letters the message
    - each message is tried up to max_retries times with exponential backoff
    - failures are logged, never surfaced to the request that caused them
    """

    def __init__(
        self,
        sender=None,
        queue_size: int = settings.NOTIFICATION_QUEUE_SIZE,
        max_retries: int = settings.NOTIFICATION_MAX_RETRIES,
        backoff: float = settings.NOTIFICATION_BACKOFF,
    ):
        self.sender = sender or email_service
        self.queue_size = queue_size
        self.max_retries = max(max_retries, 1)
        self.backoff = backoff
        self._queue: Optional[asyncio.Queue] = None
        self._worker: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        """Create the queue and worker on the running event loop"""
        if self.is_running:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._worker = asyncio.create_task(self._run())
        logger.info(f"Notification worker started (queue size {self.queue_size})")

    async def stop(self, timeout: float = 5.0) -> None:
        """Give queued messages a chance to go out, then stop the worker"""
        if not self.is_running:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Stopping with {self._queue.qsize()} undelivered notifications")

        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        self._queue = None
        logger.info("Notification worker stopped")

    async def drain(self) -> None:
        """Wait until everything queued so far has been handled"""
        if self._queue is not None:
            await self._queue.join()

    def enqueue(self, recipient: str, template: str, variables: Dict[str, Any]) -> bool:
        """Hand a notification to the worker; returns False if it was dropped"""
        notification = Notification(recipient=recipient, template=template, variables=variables)

        if not self.is_running:
            self._dead_letter(notification, "notification worker is not running")
            return False

        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            self._dead_letter(notification, "notification queue is full")
            return False

        logger.debug(f"Queued '{template}' notification for {recipient}")
        return True

    async def _run(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self._deliver(notification)
            except Exception as e:
                logger.error(f"Unexpected notification worker error: {str(e)}", exc_info=True)
            finally:
                self._queue.task_done()

    async def _deliver(self, notification: Notification) -> bool:
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self.sender.send(
                    notification.recipient, notification.template, notification.variables
                )
            except Exception as e:
                if attempt == self.max_retries:
                    self._dead_letter(notification, f"{type(e).__name__}: {str(e)}")
                    return False
                wait = self.backoff * (2 ** (attempt - 1))
                logger.warning(
                    f"Sending '{notification.template}' to {notification.recipient} failed "
                    f"({str(e)}), retrying in {wait:.1f}s (attempt {attempt}/{self.max_retries})"
                )
                await asyncio.sleep(wait)
        return False

    @staticmethod
    def _dead_letter(notification: Notification, reason: str) -> None:
        logger.error(
            f"Dead letter: '{notification.template}' for {notification.recipient} dropped: {reason}"
        )

    # ---- workflow notifications ----

    @staticmethod
    def _course_url(course) -> str:
        return f"{settings.FRONTEND_URL}/courses/{course.id}"

    def notify_enrollment(self, user, course) -> bool:
        return self.enqueue(user.email, "enrollment-confirmation", {
            "user_name": user.name,
            "course_title": course.title,
            "instructor_name": course.instructor.name if course.instructor else None,
            "course_url": self._course_url(course),
        })

    def notify_lesson_completion(self, user, lesson, course, progress) -> bool:
        return self.enqueue(user.email, "lesson-completion", {
            "user_name": user.name,
            "lesson_title": lesson.title,
            "course_title": course.title,
            "progress": progress.progress_percentage,
            "completed_lessons": len(progress.completed_lessons),
            "course_url": self._course_url(course),
        })

    def notify_course_completion(self, user, course, certificate) -> bool:
        return self.enqueue(user.email, "course-completion", {
            "user_name": user.name,
            "course_title": course.title,
            "certificate_id": certificate.certificate_id,
            "verification_url": certificate.verification_url,
            "completion_date": certificate.completion_date.strftime("%B %d, %Y"),
            "score": certificate.score,
        })

    def notify_quiz_result(self, user, quiz, attempt, lesson, course) -> bool:
        return self.enqueue(user.email, "quiz-result", {
            "user_name": user.name,
            "quiz_title": quiz.title,
            "lesson_title": lesson.title if lesson else "",
            "course_title": course.title if course else "",
            "score": f"{attempt.score:g}",
            "total_points": f"{attempt.total_points:g}",
            "percentage": f"{attempt.percentage:.1f}",
            "passed": attempt.passed,
            "attempt_number": attempt.attempt_number,
            "max_attempts": quiz.attempts,
            "can_retake": attempt.attempt_number < quiz.attempts,
            "course_url": self._course_url(course) if course else settings.FRONTEND_URL,
        })

    def notify_course_published(self, users: Iterable, course) -> int:
        """Fan out to every subscriber; returns how many were queued"""
        queued = 0
        for user in users:
            queued += self.enqueue(user.email, "new-course-published", {
                "user_name": user.name,
                "course_title": course.title,
                "course_description": course.description,
                "course_level": course.level,
                "course_url": self._course_url(course),
            })
        return queued


# Global instance
notification_service = NotificationService()
