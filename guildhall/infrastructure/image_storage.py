"""Image Storage: persists uploaded server images on local disk and returns public URLs.

Invariants:
    - Stored names are `<uuid4>_<sanitised original name>`: collision-resistant
    - Directory creation is idempotent
    - Uploads larger than max_bytes are rejected before anything is written
    - OS failures surface as StorageError, never as raw OSError

Design Decisions:
    - Satisfies core ImageStorage Protocol: an object-store backend can replace it
      without touching services or resolvers
    - Read at most max_bytes + 1: enough to detect oversize without buffering it all
    - Disk IO runs in the threadpool, never on the event loop
"""

import logging
import re
import uuid
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from guildhall.core.errors import ImageTooLargeError, InvalidInputError, StorageError
from guildhall.core.repository_protocols import UploadLike

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_LENGTH = 100


def _write_file(directory: Path, name: str, data: bytes) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_bytes(data)


def sanitize_filename(filename: str | None) -> str:
    """Strip directories and unsafe characters from a client-supplied name."""
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name[-_MAX_NAME_LENGTH:] or "image"


class LocalImageStorage:
    """Write images under a directory served at base_url."""

    def __init__(self, directory: str | Path, base_url: str, max_bytes: int):
        self._directory = Path(directory)
        self._base_url = base_url.rstrip("/")
        self._max_bytes = max_bytes

    @property
    def directory(self) -> Path:
        return self._directory

    async def store(self, upload: UploadLike, filename: str | None = None) -> str:
        data = await upload.read(self._max_bytes + 1)
        if len(data) > self._max_bytes:
            raise ImageTooLargeError(self._max_bytes)
        if not data:
            raise InvalidInputError("Image is empty", "file")

        unique_name = f"{uuid.uuid4()}_{sanitize_filename(filename or upload.filename)}"
        try:
            await run_in_threadpool(_write_file, self._directory, unique_name, data)
        except OSError as e:
            logger.error(f"Failed to write image {unique_name}: {e}")
            raise StorageError("could not write image")

        logger.info(f"Stored image {unique_name} ({len(data)} bytes)")
        return f"{self._base_url}/{unique_name}"

    async def discard(self, url: str) -> None:
        """Remove a previously stored image; unknown URLs are ignored."""
        prefix = f"{self._base_url}/"
        if not url.startswith(prefix):
            return
        name = Path(url[len(prefix):]).name
        try:
            await run_in_threadpool((self._directory / name).unlink, missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to discard image {name}: {e}")
