"""Profile photo object store.

The registry only ever asks the store to keep some bytes and hand back a URI
that is saved as ``profile_pic``.  This implementation keeps files on local
disk under ``PHOTO_DIR/family_profiles`` and serves them via ``/photos``.
"""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path

from .errors import NotFound, PreconditionFailed
from .settings import get_settings

log = logging.getLogger(__name__)

PHOTO_FOLDER = "family_profiles"

# Maximum upload size: 10 MB.
MAX_PHOTO_BYTES = 10 * 1024 * 1024

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}

_NAME_RE = re.compile(r"^[0-9a-f]{32}\.(jpg|jpeg|png)$")


class PhotoStore:
    def __init__(self, root: Path, url_prefix: str) -> None:
        self.root = Path(root) / PHOTO_FOLDER
        self.url_prefix = url_prefix.rstrip("/")

    def put(self, data: bytes, filename: str) -> str:
        """Store *data* and return the URI to save on the person record."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise PreconditionFailed(
                f"Unsupported photo type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
        if not data:
            raise PreconditionFailed("Uploaded photo is empty")
        if len(data) > MAX_PHOTO_BYTES:
            raise PreconditionFailed(
                f"Photo too large ({len(data):,} bytes). Max: {MAX_PHOTO_BYTES:,} bytes."
            )

        name = f"{uuid.uuid4().hex}{ext}"
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / name).write_bytes(data)
        log.info("stored photo %s (%d bytes)", name, len(data))
        return f"{self.url_prefix}/{name}"

    def discard(self, uri: str) -> None:
        """Remove a photo stored by :meth:`put` whose record was never saved."""
        name = uri.rsplit("/", 1)[-1]
        if not _NAME_RE.match(name):
            return
        (self.root / name).unlink(missing_ok=True)
        log.info("discarded photo %s", name)

    def path_for(self, name: str) -> Path:
        if not _NAME_RE.match(name):
            raise NotFound("photo not found")
        path = self.root / name
        if not path.is_file():
            raise NotFound("photo not found")
        return path


def get_photo_store() -> PhotoStore:
    settings = get_settings()
    return PhotoStore(settings.photo_dir, settings.photo_url_prefix)
