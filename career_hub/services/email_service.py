"""
Email rendering and SMTP delivery
"""
import asyncio
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Any, Dict, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from career_hub.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

# Subject line per template, rendered with the same variables as the body
SUBJECTS = {
    "enrollment-confirmation": "You're enrolled in {{ course_title }}",
    "lesson-completion": "Lesson complete: {{ lesson_title }} ({{ progress }}% of {{ course_title }})",
    "course-completion": "Congratulations! You completed {{ course_title }}",
    "quiz-result": "{% if passed %}You passed{% else %}Your result for{% endif %} {{ quiz_title }}",
    "new-course-published": "New course available: {{ course_title }}",
}


class EmailService:
    """Renders HTML templates with jinja2 and sends them over SMTP"""

    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        self.environment = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
        )

    @property
    def is_configured(self) -> bool:
        return bool(settings.SMTP_HOST)

    def render(self, template_name: str, variables: Dict[str, Any]) -> Tuple[str, str]:
        """
        Render a template

        Returns:
            Tuple of (subject, html_body)
        """
        if template_name not in SUBJECTS:
            raise ValueError(f"Unknown email template: {template_name}")

        context = {"app_name": settings.APP_NAME, **variables}
        subject = self.environment.from_string(SUBJECTS[template_name]).render(**context)
        body = self.environment.get_template(f"{template_name}.html").render(**context)
        return subject.strip(), body

    async def send(self, recipient: str, template_name: str, variables: Dict[str, Any]) -> bool:
        """
        Render and deliver one email

        Returns:
            True when handed to the SMTP server, False when sending is disabled

        Raises:
            Rendering and SMTP errors propagate so the caller can retry
        """
        subject, body = self.render(template_name, variables)

        if not self.is_configured:
            logger.info(f"SMTP not configured, skipping '{template_name}' email to {recipient}")
            return False

        await asyncio.to_thread(self._deliver, recipient, subject, body)
        logger.info(f"Email '{template_name}' sent to {recipient}")
        return True

    def _deliver(self, recipient: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = settings.EMAIL_FROM
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable email client.")
        message.add_alternative(body, subtype="html")

        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USER:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(message)


# Global instance
email_service = EmailService()
