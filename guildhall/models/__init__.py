"""ORM Models: SQLAlchemy declarative models for profiles, servers, channels, members.

Invariants:
    - All models inherit from Base (db/base.py)
    - Server is the aggregate root for channels and members

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from guildhall.models.profile import Profile  # noqa: F401
from guildhall.models.server import Server  # noqa: F401
from guildhall.models.channel import Channel  # noqa: F401
from guildhall.models.member import Member  # noqa: F401
