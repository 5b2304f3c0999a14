"""
Admin API endpoints for the ProConnect moderation console.
All endpoints require the admin account.
"""
from fastapi import APIRouter

from app.api.v1.endpoints.admin import dashboard, users, projects, reports, project_of_week, awards

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

# Include all admin sub-routers
admin_router.include_router(dashboard.router, tags=["Admin Dashboard"])
admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
admin_router.include_router(projects.router, prefix="/projects", tags=["Admin Projects"])
admin_router.include_router(reports.router, prefix="/reports", tags=["Admin Reports"])
admin_router.include_router(project_of_week.router, prefix="/project-of-week", tags=["Admin Project of the Week"])
admin_router.include_router(awards.router, prefix="/awards", tags=["Admin Awards"])
