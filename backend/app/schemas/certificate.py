from typing import Optional

from app.models.certificate import Certificate
from app.schemas.common import CamelModel, iso


class CertificateRequest(CamelModel):
    project_id: Optional[str] = None


class ContestCertificateRequest(CamelModel):
    project_id: Optional[str] = None
    certificate_type: Optional[str] = None


def serialize_certificate(certificate: Certificate) -> dict:
    project = certificate.project
    return {
        "id": certificate.id,
        "certificateId": certificate.certificate_id,
        "certificateUrl": certificate.certificate_url,
        "certificateType": certificate.certificate_type.value,
        "projectId": certificate.project_id,
        "projectTitle": certificate.project_title,
        "projectImage": project.image_url if project else None,
        "weekNumber": certificate.week_number,
        "year": certificate.year,
        "createdAt": iso(certificate.created_at),
    }
