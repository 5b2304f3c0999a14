"""
Custom Exceptions for ProConnect
================================

Services raise these instead of HTTPException so that the same error
carries a stable machine-readable code, an HTTP status and optional
details. A single handler in app.main renders them.

Usage:
    from app.core.exceptions import ProjectNotFoundError, NotOwnerError

    if not project:
        raise ProjectNotFoundError(project_id)
    if project.owner_id != user.id:
        raise NotOwnerError("Only the project owner can register for contest")
"""

from typing import Optional, Any, Dict


class ProConnectError(Exception):
    """Base exception for all ProConnect errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(ProConnectError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", code: str = "AUTH_FAILED"):
        super().__init__(message, code=code)


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid or expired"""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    def __init__(self):
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class AuthorizationError(ProConnectError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized", code: str = "NOT_AUTHORIZED",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class AdminRequiredError(AuthorizationError):
    def __init__(self):
        super().__init__("Access denied. Admin only.", code="ADMIN_REQUIRED")


class AccountSuspendedError(AuthorizationError):
    def __init__(self):
        super().__init__("Your account is suspended. Contact admin.", code="ACCOUNT_SUSPENDED")


class NotOwnerError(AuthorizationError):
    """Caller does not own the resource it is acting on"""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_OWNER")


class ContestWindowClosedError(AuthorizationError):
    """The weekly contest is not in the phase this action needs"""

    def __init__(self, message: str, required_phase: str, current_phase: str, flag: Optional[str] = None):
        details = {"required_phase": required_phase, "current_phase": current_phase}
        if flag:
            # Mirrors the boolean the client already reads (canRegister / canEvaluate)
            details[flag] = False
        super().__init__(message, code="CONTEST_WINDOW_CLOSED", details=details)


class CertificateNotEligibleError(AuthorizationError):
    def __init__(self, certificate_type: str):
        super().__init__(
            f"No {certificate_type} contest result found for this project",
            code="NOT_ELIGIBLE",
            details={"certificate_type": certificate_type}
        )


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(ProConnectError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class ProjectNotFoundError(ResourceNotFoundError):
    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class CommentNotFoundError(ResourceNotFoundError):
    def __init__(self, comment_id: str):
        super().__init__("Comment", comment_id)


class ContestantNotFoundError(ResourceNotFoundError):
    def __init__(self, contestant_id: str):
        super().__init__("Contestant", contestant_id)


class CertificateNotFoundError(ResourceNotFoundError):
    def __init__(self, certificate_id: str):
        super().__init__("Certificate", certificate_id)


class CertificateFileMissingError(ResourceNotFoundError):
    """Certificate row exists but its PDF is gone from disk"""

    def __init__(self, certificate_id: str):
        super().__init__("Certificate file", certificate_id)
        self.code = "CERTIFICATE_FILE_MISSING"


class NotificationNotFoundError(ResourceNotFoundError):
    def __init__(self, notification_id: str):
        super().__init__("Notification", notification_id)


class FriendRequestNotFoundError(ResourceNotFoundError):
    def __init__(self, request_id: str):
        super().__init__("Friend request", request_id)


class ReportNotFoundError(ResourceNotFoundError):
    def __init__(self, report_id: str):
        super().__init__("Report", report_id)


class NoContestantsError(ProConnectError):
    """Scoring was asked to pick from an empty field"""

    status_code = 404

    def __init__(self, week_number: Optional[int] = None, year: Optional[int] = None):
        details: Dict[str, Any] = {"hasContestants": False}
        if week_number is not None:
            details.update({"weekNumber": week_number, "year": year})
        super().__init__("No contestants found for this week", code="NO_CONTESTANTS", details=details)


# ============================================
# Conflict Errors (409-type)
# ============================================

class ConflictError(ProConnectError):
    status_code = 409

    def __init__(self, message: str, code: str = "CONFLICT", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class EmailTakenError(ConflictError):
    def __init__(self):
        super().__init__("User already exists", code="EMAIL_TAKEN")


class AdminExistsError(ConflictError):
    def __init__(self):
        super().__init__("Admin account already exists. Only one admin is allowed.", code="ADMIN_EXISTS")


class AlreadyRegisteredError(ConflictError):
    def __init__(self, week_number: int, year: int):
        super().__init__(
            "This project is already registered for this week's contest",
            code="ALREADY_REGISTERED",
            details={"alreadyRegistered": True, "weekNumber": week_number, "year": year}
        )


class AlreadyApprovedError(ConflictError):
    def __init__(self, project_id: str, week_number: int, year: int):
        super().__init__(
            "This project has already been approved as Project of the Week",
            code="ALREADY_APPROVED",
            details={"projectId": str(project_id), "weekNumber": week_number, "year": year}
        )


class DuplicateFriendRequestError(ConflictError):
    def __init__(self, message: str = "Friend request already sent"):
        super().__init__(message, code="DUPLICATE_FRIEND_REQUEST")


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(ProConnectError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: ProConnectError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "detail": error.message,
        "error": error.to_dict()
    }
