# Domain services; each works over the request's AsyncSession
from app.services.certificate_service import CertificateService
from app.services.contest_service import ContestService
from app.services.insights_service import InsightsService
from app.services.notification_service import NotificationService
from app.services.project_service import ProjectService
from app.services.social_service import SocialService

__all__ = [
    "CertificateService",
    "ContestService",
    "InsightsService",
    "NotificationService",
    "ProjectService",
    "SocialService",
]
