"""Profile model: a staff member who can sign in."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from rtw_checker.models.base import Base, TimestampMixin
from rtw_checker.models.enums import ProfileRole


class Profile(TimestampMixin, Base):
    """Staff profile; ``role`` decides manager-only capabilities."""

    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=ProfileRole.STAFF.value, nullable=False)

    @property
    def is_manager(self) -> bool:
        return self.role == ProfileRole.MANAGER.value

    def __repr__(self) -> str:
        return f"<Profile email={self.email} role={self.role}>"
