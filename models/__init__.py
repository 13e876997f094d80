"""Domain records, in-process stores and the SQLAlchemy character store."""
from models.role import Role
from models.user import User

__all__ = ["Role", "User"]
