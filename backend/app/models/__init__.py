# Re-export all models for convenient imports
from app.models.user import User, UserRole, user_friends
from app.models.project import Project, ProjectLike, ProjectComment, ProjectVisibility
from app.models.contest import (
    Contestant,
    ContestantStatus,
    ContestCertificateType,
    ContestPhase,
    ContestWeek,
    ProjectOfTheWeek,
)
from app.models.notification import Notification, NotificationType
from app.models.certificate import Certificate, CertificateKind
from app.models.report import Report, ReportStatus, ReportAction
from app.models.friend_request import FriendRequest, FriendRequestStatus

__all__ = [
    # User
    "User",
    "UserRole",
    "user_friends",
    # Project
    "Project",
    "ProjectLike",
    "ProjectComment",
    "ProjectVisibility",
    # Contest
    "Contestant",
    "ContestantStatus",
    "ContestCertificateType",
    "ContestPhase",
    "ContestWeek",
    "ProjectOfTheWeek",
    # Social
    "Notification",
    "NotificationType",
    "FriendRequest",
    "FriendRequestStatus",
    # Certificates
    "Certificate",
    "CertificateKind",
    # Moderation
    "Report",
    "ReportStatus",
    "ReportAction",
]
