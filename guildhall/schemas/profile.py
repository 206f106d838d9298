"""Profile Schemas: validation for profile creation input.

Invariants:
    - name: 1-100 chars, stripped, non-empty
    - email, when given, must look like an address; the verified claim wins
"""

from pydantic import BaseModel, Field, field_validator


class ProfileCreate(BaseModel):
    """Profile creation payload."""
    name: str = Field(min_length=1, max_length=100)
    email: str | None = Field(
        None, max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
    )
    image_url: str | None = Field(None, max_length=2048)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v
