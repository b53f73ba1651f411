from app.models.user import User, Role, user_roles
from app.models.category import Category
from app.models.job import Job
from app.models.banner import Banner

__all__ = ["User", "Role", "user_roles", "Category", "Job", "Banner"]
