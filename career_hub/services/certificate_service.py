"""
Certificate issuance, verification and reconciliation
"""
import logging
import secrets
import string
import time
from datetime import datetime
from typing import Dict, Any, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from career_hub.config import settings
from career_hub.exceptions import NotFoundError, PreconditionError
from career_hub.models import Certificate, Course, CourseProgress
from career_hub.models.types import utcnow
from career_hub.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase


class CertificateService:
    """
    Service for minting and looking up course certificates

    Identifier format: <PREFIX>-<epoch milliseconds>-<base-36 suffix>, uppercased.
    One certificate exists per (user, course); issuing again returns it.
    """

    def generate_certificate_id(self) -> str:
        suffix = "".join(
            secrets.choice(BASE36_ALPHABET) for _ in range(settings.CERTIFICATE_SUFFIX_LENGTH)
        )
        return f"{settings.CERTIFICATE_PREFIX}-{int(time.time() * 1000)}-{suffix}".upper()

    @staticmethod
    def verification_url(certificate_id: str) -> str:
        return f"{settings.FRONTEND_URL.rstrip('/')}/verify/{certificate_id}"

    @staticmethod
    def overall_score(progress: Optional[CourseProgress]) -> Optional[int]:
        """Mean of the best quiz scores, halves rounded up; None without quiz results"""
        if progress is None or not progress.quiz_results:
            return None
        total = sum(result.best_score for result in progress.quiz_results)
        return round_half_up(total / len(progress.quiz_results))

    def _unused_certificate_id(self, db: Session) -> str:
        for attempt in range(1, settings.CERTIFICATE_ID_RETRIES + 1):
            certificate_id = self.generate_certificate_id()
            taken = db.query(Certificate.id).filter(
                Certificate.certificate_id == certificate_id
            ).first()
            if not taken:
                return certificate_id
            logger.warning(f"Certificate id collision on {certificate_id} (attempt {attempt})")
        raise RuntimeError("Could not generate a unique certificate id")

    def issue(
        self,
        db: Session,
        user_id: UUID,
        course: Course,
        completion_date: datetime,
        progress: Optional[CourseProgress] = None,
        commit: bool = True
    ) -> Certificate:
        """
        Issue the certificate for (user, course), or return the existing one

        Args:
            db: Database session
            user_id: Certificate holder
            course: Completed course
            completion_date: When the course was completed
            progress: Progress record used for the score and the issued flag
            commit: False when the caller commits as part of a larger write

        Returns:
            Certificate record
        """
        certificate = db.query(Certificate).filter(
            Certificate.user_id == user_id,
            Certificate.course_id == course.id
        ).first()

        if certificate:
            logger.info(f"Certificate already issued: {certificate.certificate_id}")
        else:
            certificate_id = self._unused_certificate_id(db)
            certificate = Certificate(
                user_id=user_id,
                course_id=course.id,
                certificate_id=certificate_id,
                issued_at=utcnow(),
                completion_date=completion_date,
                score=self.overall_score(progress),
                verification_url=self.verification_url(certificate_id),
            )
            db.add(certificate)
            logger.info(
                f"Certificate {certificate_id} issued: user={user_id}, course={course.id}"
            )

        if progress is not None:
            progress.certificate_issued = True

        if commit:
            db.commit()
            db.refresh(certificate)

        return certificate

    def generate_for_user(self, db: Session, user_id: UUID, course_id: UUID) -> Tuple[Certificate, bool]:
        """
        Issue a certificate on request, once the course is fully completed

        Returns:
            Tuple of (certificate, already_existed)
        """
        course = db.get(Course, course_id)
        if not course:
            raise NotFoundError("Course not found")

        progress = db.query(CourseProgress).filter(
            CourseProgress.user_id == user_id,
            CourseProgress.course_id == course_id
        ).first()

        if not progress or progress.progress_percentage < 100:
            raise PreconditionError(
                "Course not completed yet. Complete all lessons to earn certificate."
            )

        existed = db.query(Certificate.id).filter(
            Certificate.user_id == user_id,
            Certificate.course_id == course_id
        ).first() is not None

        certificate = self.issue(
            db,
            user_id,
            course,
            completion_date=progress.completed_at or utcnow(),
            progress=progress,
        )
        return certificate, existed

    def verify(self, db: Session, certificate_id: str) -> Dict[str, Any]:
        """Public lookup returning only holder name, course title and dates"""
        certificate = db.query(Certificate).filter(
            Certificate.certificate_id == certificate_id
        ).first()

        if not certificate:
            raise NotFoundError("Certificate not found or invalid certificate ID")

        return {
            "certificate_id": certificate.certificate_id,
            "user_name": certificate.user.name,
            "course_name": certificate.course.title,
            "issued_at": certificate.issued_at,
            "completion_date": certificate.completion_date,
        }

    def reconcile(self, db: Session) -> Dict[str, int]:
        """
        Repair progress records whose certificate flag and certificate disagree

        - completed progress without a certificate gets one issued
        - an existing certificate with the flag unset gets the flag set
        """
        issued = 0
        repaired = 0

        pending = db.query(CourseProgress).filter(
            CourseProgress.progress_percentage >= 100,
            CourseProgress.certificate_issued.is_(False)
        ).all()

        for progress in pending:
            existing = db.query(Certificate.id).filter(
                Certificate.user_id == progress.user_id,
                Certificate.course_id == progress.course_id
            ).first()

            if existing:
                progress.certificate_issued = True
                repaired += 1
                continue

            course = db.get(Course, progress.course_id)
            self.issue(
                db,
                progress.user_id,
                course,
                completion_date=progress.completed_at or utcnow(),
                progress=progress,
                commit=False,
            )
            issued += 1

        db.flush()

        # Certificates whose progress record lost the flag
        flagless = db.query(CourseProgress).join(
            Certificate,
            (Certificate.user_id == CourseProgress.user_id)
            & (Certificate.course_id == CourseProgress.course_id)
        ).filter(CourseProgress.certificate_issued.is_(False)).all()

        for progress in flagless:
            progress.certificate_issued = True
            repaired += 1

        db.commit()
        logger.info(f"Certificate reconciliation: issued={issued}, flags_repaired={repaired}")

        return {"certificates_issued": issued, "flags_repaired": repaired}


# Global instance
certificate_service = CertificateService()
