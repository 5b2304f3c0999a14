# API endpoints
from . import auth, users, projects, contest, certificates, social, insights, technologies

__all__ = ["auth", "users", "projects", "contest", "certificates", "social", "insights", "technologies"]
