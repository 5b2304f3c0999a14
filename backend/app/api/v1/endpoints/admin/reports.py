"""
Admin Report moderation endpoints.

Resolving a report records the action taken. `deleted` removes the
reported project and `suspended` suspends its owner; `approved` dismisses
the report and leaves the project alone.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.clock import utcnow
from app.core.database import get_db
from app.core.exceptions import ReportNotFoundError, ValidationError
from app.core.logging_config import logger
from app.core.types import is_valid_uuid
from app.models import User, Report, ReportStatus, ReportAction
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import ResolveReportRequest, serialize_report
from app.services.project_service import ProjectService

router = APIRouter()


@router.get("")
async def list_pending_reports(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    result = await db.execute(
        select(Report)
        .where(Report.status == ReportStatus.PENDING)
        .order_by(Report.created_at.desc())
    )
    return [serialize_report(report) for report in result.scalars().all()]


@router.post("/{report_id}/resolve")
async def resolve_report(
    report_id: str,
    body: ResolveReportRequest,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    report = await db.get(Report, report_id) if is_valid_uuid(report_id) else None
    if not report:
        raise ReportNotFoundError(report_id)
    if report.status != ReportStatus.PENDING:
        raise ValidationError("Report has already been resolved")

    project = report.project
    if body.action in (ReportAction.DELETED, ReportAction.SUSPENDED) and project is None:
        raise ValidationError("Reported project no longer exists")

    if body.action == ReportAction.SUSPENDED:
        owner = project.owner
        if owner.is_admin:
            raise ValidationError("Cannot suspend admin users")
        owner.is_suspended = True

    report.status = ReportStatus.DISMISSED if body.action == ReportAction.APPROVED else ReportStatus.RESOLVED
    report.action = body.action
    report.resolved_by_id = current_admin.id
    report.resolved_at = utcnow()

    if body.action == ReportAction.DELETED:
        # Commits the report update together with the delete
        await ProjectService(db).delete(project.id)
    else:
        await db.commit()

    logger.info(f"[Admin] Report {report.id} resolved with action {body.action.value}")
    return {"message": f"Report resolved with action: {body.action.value}"}
