"""
Certificate listing, verification and maintenance API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from career_hub.database import get_db
from career_hub.exceptions import ForbiddenError, NotFoundError
from career_hub.models import Certificate, User
from career_hub.schemas.certificate import CertificateOut, CertificateVerification, ReconcileResponse
from career_hub.api.dependencies import get_current_user, require_admin
from career_hub.services.certificate_service import certificate_service

router = APIRouter(prefix="/api/certificates", tags=["certificates"])
logger = logging.getLogger(__name__)


@router.get("/verify/{certificate_id}")
async def verify_certificate(certificate_id: str, db: Session = Depends(get_db)):
    """
    Verify a certificate by its public identifier

    No authentication; only the holder name, course title and dates are returned.
    """
    data = certificate_service.verify(db, certificate_id)
    return {
        "success": True,
        "message": "Certificate is valid",
        "data": CertificateVerification(**data),
    }


@router.post("/reconcile")
async def reconcile_certificates(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Issue missing certificates and repair certificate flags"""
    try:
        counts = certificate_service.reconcile(db)
    except Exception as e:
        logger.error(f"Certificate reconciliation failed: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while reconciling certificates")

    return {"success": True, "data": ReconcileResponse(**counts)}


@router.get("")
async def get_my_certificates(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    certificates = (
        db.query(Certificate)
        .filter(Certificate.user_id == user.id)
        .order_by(Certificate.issued_at.desc())
        .all()
    )
    return {
        "success": True,
        "count": len(certificates),
        "data": [CertificateOut.model_validate(c) for c in certificates],
    }


@router.get("/{certificate_pk}")
async def get_certificate(certificate_pk: UUID, db: Session = Depends(get_db)):
    certificate = db.get(Certificate, certificate_pk)
    if not certificate:
        raise NotFoundError("Certificate not found")
    return {"success": True, "data": CertificateOut.model_validate(certificate)}


@router.get("/{certificate_pk}/download")
async def download_certificate(
    certificate_pk: UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Certificate data for the holder or an admin; PDF rendering happens client side"""
    certificate = db.get(Certificate, certificate_pk)
    if not certificate:
        raise NotFoundError("Certificate not found")

    if certificate.user_id != user.id and not user.is_admin:
        raise ForbiddenError("Not authorized to download this certificate")

    return {
        "success": True,
        "message": "Certificate ready for download",
        "data": CertificateOut.model_validate(certificate),
    }
