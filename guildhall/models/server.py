"""Server ORM: a guild owning channels and members.

Invariants:
    - invite_code is unique; regenerating it invalidates the previous code
    - profile_id references the creator
    - Created with exactly one "general" channel and one ADMIN member
    - Deleting a server cascades to its channels and members

Design Decisions:
    - channels/members loaded with selectin: the API returns them with every
      server and async sessions cannot lazy-load on attribute access
    - ORM cascade plus ON DELETE CASCADE: the ORM path covers session.delete(),
      the FK clause covers bulk deletes
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from guildhall.db.base import Base


class Server(Base):
    """Server aggregate root: owns channels and memberships."""
    __tablename__ = "servers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    invite_code: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False,
    )
    profile_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
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

    # Relationships
    channels: Mapped[list["Channel"]] = relationship(
        "Channel", back_populates="server",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Channel.id",
    )
    members: Mapped[list["Member"]] = relationship(
        "Member", back_populates="server",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="Member.id",
    )
