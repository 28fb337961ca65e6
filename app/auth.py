"""Back office accounts."""
from __future__ import annotations

from datetime import datetime

import bcrypt
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

ROLE_ENUM = ("admin", "user")


class User(Base):
    """Operator allowed into the dashboard."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), default="user", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def verify_password(self, password: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))

    @classmethod
    def create_user(cls, username: str, password: str, role: str = "user") -> User:
        """Build an unsaved user with a hashed password."""
        if role not in ROLE_ENUM:
            raise ValueError(f"Unknown role {role!r}")
        return cls(username=username, password_hash=cls.hash_password(password), role=role)

    def is_admin(self) -> bool:
        return self.role == "admin"
