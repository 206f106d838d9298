"""Upload Limits: reject oversized or multi-file multipart requests before resolvers run.

Invariants:
    - At most one file part per request; extra parts → VALIDATION_ERROR
    - A declared Content-Length above max_upload_bytes plus form overhead →
      IMAGE_TOO_LARGE, before the body is read
    - Non-multipart requests pass through untouched

Design Decisions:
    - Runs as a FastAPI dependency of the GraphQL context: Starlette caches the
      parsed form on the Request, so Strawberry reuses it instead of parsing
      the body a second time without limits
    - Errors raised here are GuildhallErrors rendered by api/error_handlers.py
"""

import logging

from fastapi import Depends, Request
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from guildhall.config import Settings, get_settings
from guildhall.core.errors import ImageTooLargeError, InvalidInputError

logger = logging.getLogger(__name__)

MAX_FILES_PER_REQUEST = 1
MAX_FORM_FIELDS = 8
# operations + map + multipart framing
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def _declared_length(request: Request) -> int | None:
    value = request.headers.get("content-length")
    if value is None or not value.isdigit():
        return None
    return int(value)


async def enforce_upload_limits(
    request: Request, settings: Settings = Depends(get_settings),
) -> None:
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        return

    length = _declared_length(request)
    if length is not None and length > settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES:
        logger.info(
            f"Rejected multipart request of {length} bytes",
            extra={"error_code": "IMAGE_TOO_LARGE", "path": request.url.path},
        )
        raise ImageTooLargeError(settings.max_upload_bytes)

    try:
        await request.form(max_files=MAX_FILES_PER_REQUEST, max_fields=MAX_FORM_FIELDS)
    except MultiPartException as e:
        raise InvalidInputError(f"Invalid multipart request: {e.message}", "file")
    except HTTPException as e:
        raise InvalidInputError(f"Invalid multipart request: {e.detail}", "file")
