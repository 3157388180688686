"""
Removal of uploaded venue images.

Venue ``images`` hold paths such as ``/uploads/abc.jpg`` or ``abc.jpg``;
both resolve under ``UPLOADS_DIR``.  Paths that would escape that
directory are skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path

from venuebook import config

logger = logging.getLogger(__name__)


def resolve_upload(image: str) -> Path | None:
    """Absolute path of an uploaded image, or None if it is outside the uploads dir."""
    root = Path(config.UPLOADS_DIR).resolve()
    relative = image.strip().lstrip("/")
    if relative.startswith("uploads/"):
        relative = relative[len("uploads/"):]
    if not relative:
        return None

    path = (root / relative).resolve()
    if not path.is_relative_to(root):
        return None
    return path


def purge_images(images: list[str]) -> int:
    """Delete the given uploaded files. Returns how many were removed."""
    deleted = 0
    for image in images:
        if not image or not isinstance(image, str):
            continue
        path = resolve_upload(image)
        if path is None:
            logger.warning("Refusing to delete image outside uploads dir: %s", image)
            continue
        try:
            path.unlink()
            deleted += 1
        except FileNotFoundError:
            logger.info("Image file not found (already deleted?): %s", path)
        except OSError:
            logger.error("Error deleting image %s", path, exc_info=True)
    return deleted
