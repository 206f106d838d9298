"""Server Schemas: validation for server and channel mutation input.

Invariants:
    - Names are 1-100 chars, stripped, non-empty
    - Ids are positive integers
    - ChannelCreate.type defaults to TEXT
"""

from pydantic import BaseModel, Field, field_validator

from guildhall.core.domain_types import ChannelType


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class ServerCreate(BaseModel):
    """Server creation payload; profile_id defaults to the caller's profile."""
    name: str = Field(min_length=1, max_length=100)
    profile_id: int | None = Field(None, gt=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class ServerUpdate(BaseModel):
    """Server update payload."""
    server_id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class ChannelCreate(BaseModel):
    """Channel creation payload."""
    server_id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=100)
    type: ChannelType = ChannelType.TEXT

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)
