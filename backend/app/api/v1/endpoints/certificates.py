"""
Certificates API - completion and contest certificates as PDF files.

Generation is idempotent: asking again for a certificate that already
exists returns the stored one with 200 instead of 201.
"""
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ContestClock, get_contest_clock
from app.core.database import get_db
from app.core.rate_limiter import render_rate_limit
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.certificate import (
    CertificateRequest,
    ContestCertificateRequest,
    serialize_certificate,
)
from app.services.certificate_service import CertificateService

router = APIRouter()


def get_certificate_service(
    db: AsyncSession = Depends(get_db),
    clock: ContestClock = Depends(get_contest_clock),
) -> CertificateService:
    return CertificateService(db, clock)


@router.post("/generate", status_code=status.HTTP_201_CREATED)
@render_rate_limit()
async def generate_certificate(
    request: Request,
    body: CertificateRequest,
    response: Response,
    service: CertificateService = Depends(get_certificate_service),
    current_user: User = Depends(get_current_user)
):
    """Completion certificate for one of the caller's projects"""
    certificate, created = await service.issue_completion(body.project_id, current_user)
    if not created:
        response.status_code = status.HTTP_200_OK
    return {
        "message": "Certificate generated successfully" if created else "Certificate already exists",
        "certificateUrl": certificate.certificate_url,
        "certificateId": certificate.certificate_id,
    }


@router.post("/generate-contest", status_code=status.HTTP_201_CREATED)
@render_rate_limit()
async def generate_contest_certificate(
    request: Request,
    body: ContestCertificateRequest,
    response: Response,
    service: CertificateService = Depends(get_certificate_service),
    current_user: User = Depends(get_current_user)
):
    """Winner or participant certificate; requires a matching contest entry"""
    certificate, created = await service.issue_contest(
        body.project_id, body.certificate_type, current_user
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return {
        "message": (
            f"{certificate.certificate_type.value.capitalize()} certificate generated successfully"
            if created else "Certificate already exists"
        ),
        "certificateUrl": certificate.certificate_url,
        "certificateId": certificate.certificate_id,
        "certificateType": certificate.certificate_type.value,
    }


@router.get("/my-certificates")
async def my_certificates(
    service: CertificateService = Depends(get_certificate_service),
    current_user: User = Depends(get_current_user)
):
    return [serialize_certificate(c) for c in await service.list_for_user(current_user)]


@router.get("/check/{project_id}")
async def check_certificate(
    project_id: str,
    service: CertificateService = Depends(get_certificate_service),
    current_user: User = Depends(get_current_user)
):
    certificate = await service.check(project_id)
    if certificate is None:
        return {"exists": False}
    return {
        "exists": True,
        "certificateId": certificate.certificate_id,
        "certificateUrl": certificate.certificate_url,
    }


@router.get("/{certificate_id}/download")
async def download_certificate(
    certificate_id: str,
    service: CertificateService = Depends(get_certificate_service),
    current_user: User = Depends(get_current_user)
):
    certificate = await service.get_by_public_id(certificate_id)
    path = service.resolve_file(certificate)
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=certificate.file_name,
    )
