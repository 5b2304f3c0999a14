from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth, users, projects, contest, certificates, social, insights, technologies,
)
from app.api.v1.endpoints.admin import admin_router

api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "proconnect-backend"}


# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(contest.router, prefix="/contest", tags=["Project of the Week"])
api_router.include_router(certificates.router, prefix="/certificates", tags=["Certificates"])
api_router.include_router(social.router, tags=["Friends & Notifications"])
api_router.include_router(insights.router, prefix="/insights", tags=["Insights"])
api_router.include_router(technologies.router, prefix="/technologies", tags=["Technologies"])
api_router.include_router(admin_router)
