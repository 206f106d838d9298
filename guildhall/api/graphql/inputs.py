"""GraphQL Input Types and their validation against the Pydantic schemas.

Invariants:
    - Every input is validated by a schemas/ model before reaching a service
    - Pydantic failures become InvalidInputError (VALIDATION_ERROR) naming the field
"""

import dataclasses
from typing import TypeVar

import strawberry
from pydantic import BaseModel, ValidationError

from guildhall.api.graphql.types import ChannelTypeEnum
from guildhall.core.domain_types import ChannelType
from guildhall.core.errors import InvalidInputError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@strawberry.input
class CreateProfileInput:
    name: str
    email: str | None = None
    image_url: str | None = None


@strawberry.input
class CreateServerInput:
    name: str
    profile_id: int | None = None


@strawberry.input
class UpdateServerInput:
    server_id: int
    name: str


@strawberry.input
class CreateChannelInput:
    server_id: int
    name: str
    type: ChannelTypeEnum = ChannelType.TEXT


def validate_input(schema: type[SchemaT], data: object) -> SchemaT:
    """Validate a Strawberry input instance with a Pydantic schema."""
    payload = dataclasses.asdict(data) if dataclasses.is_dataclass(data) else data
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or None
        raise InvalidInputError(
            f"{field}: {first['msg']}" if field else first["msg"], field,
        )
