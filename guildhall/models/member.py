"""Member ORM: joins a Profile to a Server with a role.

Invariants:
    - (profile_id, server_id) is unique: one membership per profile per server
    - role defaults to GUEST, the lowest privilege
    - profile is eagerly loaded: server payloads always include member profiles
"""

from datetime import datetime, timezone

from sqlalchemy import Enum, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from guildhall.core.domain_types import DEFAULT_ROLE, MemberRole
from guildhall.db.base import Base


class Member(Base):
    """Membership entity."""
    __tablename__ = "members"
    __table_args__ = (
        UniqueConstraint("profile_id", "server_id", name="uq_members_profile_server"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role: Mapped[MemberRole] = mapped_column(
        Enum(MemberRole, native_enum=False, length=20),
        nullable=False, default=DEFAULT_ROLE,
    )
    profile_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
    )
    server_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("servers.id", ondelete="CASCADE"),
        index=True, nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    profile: Mapped["Profile"] = relationship("Profile", lazy="selectin")
    server: Mapped["Server"] = relationship(
        "Server", back_populates="members",
    )
