import os
import re
from dataclasses import dataclass
from datetime import datetime
from itertools import count
from typing import Callable

from ...exceptions import InvalidName

UPLOAD_PREFIX = "/uploads/images"

_TYPE_PATTERN = re.compile(r"^[a-z0-9_-]+$")
_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:")


def validate_filename(filename: str) -> str:
    """Return the filename unchanged or raise InvalidName if it is unsafe to store."""
    if filename is None or not filename.strip():
        raise InvalidName("Filename must not be empty")
    if ".." in filename:
        raise InvalidName(f"Filename contains a path traversal sequence: {filename}")
    if filename.startswith(("/", "\\")) or _DRIVE_PATTERN.match(filename):
        raise InvalidName(f"Filename must not be an absolute path: {filename}")
    if "/" in filename or "\\" in filename or "\x00" in filename:
        raise InvalidName(f"Filename must not contain path separators: {filename}")
    # "." and similar names collapse onto the containing directory
    if filename == "." or os.path.basename(os.path.normpath(filename)) != filename:
        raise InvalidName(f"Filename does not name a file: {filename}")
    return filename


def date_bucket(timestamp: datetime) -> str:
    # e.g. 2026-10-Oct
    return timestamp.strftime("%Y-%m-%b")


@dataclass
class PathResolver:
    """Builds storage-relative paths of the form /uploads/images/<type>/<YYYY-MM-Mon>/<filename>.

    ``exists`` answers whether a candidate path is already taken, by a blob
    or by a record. The first free candidate wins; collisions get a numeric
    suffix before the extension (``photo-1.png``, ``photo-2.png``, ...).
    """

    exists: Callable[[str], bool]

    def resolve(self, image_type: str, filename: str, timestamp: datetime) -> str:
        validate_filename(filename)
        if not image_type or not _TYPE_PATTERN.match(image_type):
            raise InvalidName(f"Invalid image type segment: {image_type!r}")

        directory = f"{UPLOAD_PREFIX}/{image_type}/{date_bucket(timestamp)}"
        candidate = f"{directory}/{filename}"
        if not self.exists(candidate):
            return candidate

        stem, ext = os.path.splitext(filename)
        for n in count(1):
            candidate = f"{directory}/{stem}-{n}{ext}"
            if not self.exists(candidate):
                return candidate
