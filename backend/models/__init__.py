from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base; Alembic reads Base.metadata"""


# The users table is the only model; importing it registers it on Base.metadata
from models.user import AuthProvider, User

__all__ = ["AuthProvider", "Base", "User"]
