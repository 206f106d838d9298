"""Channel ORM: a typed sub-space of a server.

Invariants:
    - Always belongs to exactly one Server (server_id FK, cascade)
    - profile_id references the creator; only the creator may delete it
    - The channel named "general" is protected from deletion
"""

from datetime import datetime, timezone

from sqlalchemy import Enum, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from guildhall.core.domain_types import ChannelType
from guildhall.db.base import Base


class Channel(Base):
    """Channel entity."""
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[ChannelType] = mapped_column(
        Enum(ChannelType, native_enum=False, length=20),
        nullable=False, default=ChannelType.TEXT,
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

    server: Mapped["Server"] = relationship(
        "Server", back_populates="channels",
    )
