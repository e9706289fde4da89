import re
import base64
import binascii
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..ports.image_repo import ImageRecordRepository, ImageRecord
from ..ports.blob_store import BlobStore
from ..ports.audit_logger import AuditLogger
from .path_resolver import PathResolver, validate_filename
from ...core.config import settings
from ...exceptions import (
    DecodeError,
    IOFailure,
    NotFound,
    PathTaken,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_MIME_PATTERN = re.compile(r"image/([a-zA-Z0-9.+-]+)")
_EXTENSIONS = {"jpeg": "jpg", "svg+xml": "svg", "x-icon": "ico"}


def split_base64_payload(payload: str) -> Tuple[str, Optional[str]]:
    """Split ``image/png;base64,<data>`` (or a full data URL) into data and mime subtype."""
    marker = payload.find("base64,")
    if marker == -1:
        return payload, None
    header = payload[:marker]
    match = _MIME_PATTERN.search(header)
    return payload[marker + len("base64,"):], (match.group(1).lower() if match else None)


def decode_base64_payload(payload: str) -> Tuple[bytes, str]:
    """Decode a base64 image payload, returning the bytes and a file extension."""
    if not isinstance(payload, str):
        raise DecodeError("Image payload must be a base64 string")
    data, subtype = split_base64_payload(payload.strip())
    try:
        content = base64.b64decode("".join(data.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Image payload is not valid base64") from e
    extension = _EXTENSIONS.get(subtype, subtype) if subtype else "png"
    return content, extension


@dataclass
class ImageService:
    image_repo: ImageRecordRepository
    blob_store: BlobStore
    audit_logger: Optional[AuditLogger] = None
    base_url: str = field(default_factory=lambda: settings.BASE_URL)
    image_types: List[str] = field(default_factory=lambda: list(settings.IMAGE_TYPES))
    max_file_size: int = field(default_factory=lambda: settings.MAX_FILE_SIZE)
    resolve_attempts: int = field(default_factory=lambda: settings.PATH_RESOLVE_ATTEMPTS)
    clock: Callable[[], datetime] = datetime.utcnow

    def _audit(self, action: str, actor_id: Optional[int], image_id: Optional[int] = None, success: bool = True, **details) -> None:
        if self.audit_logger is not None:
            self.audit_logger.log(action, actor_id, image_id=image_id, success=success, details=details)

    def _path_taken(self, path: str) -> bool:
        return self.blob_store.exists(path) or self.image_repo.path_exists(path)

    def _check_content(self, data: bytes) -> None:
        if not data:
            raise ValidationError("Image content is empty")
        if len(data) > self.max_file_size:
            raise ValidationError(f"Image too large (max {self.max_file_size // (1024 * 1024)}MB)")

    def _check_type(self, image_type: str) -> None:
        if image_type not in self.image_types:
            raise ValidationError(f"Unknown image type: {image_type}")

    def _allocate_blob(self, image_type: str, filename: str, data: bytes) -> str:
        resolver = PathResolver(exists=self._path_taken)
        timestamp = self.clock()
        for _ in range(self.resolve_attempts):
            path = resolver.resolve(image_type, filename, timestamp)
            try:
                self.blob_store.create(path, data)
                return path
            except PathTaken:
                logger.info(f"Path {path} was claimed concurrently, resolving again")
        raise IOFailure(f"Could not allocate a storage path for {filename}")

    def get(self, image_id: int) -> ImageRecord:
        record = self.image_repo.get_by_id(image_id)
        if record is None:
            raise NotFound(f"Image {image_id} not found")
        return record

    def upload(self, data: bytes, filename: str, image_type: str, uploaded_to: int, actor_id: int) -> ImageRecord:
        self._check_content(data)
        validate_filename(filename)
        self._check_type(image_type)

        path = self._allocate_blob(image_type, filename, data)
        try:
            record = self.image_repo.create(
                name=filename,
                image_type=image_type,
                path=path,
                url=self.base_url.rstrip("/") + path,
                uploaded_to=uploaded_to or 0,
                actor_id=actor_id,
            )
        except Exception:
            try:
                self.blob_store.delete(path)
            except IOFailure as cleanup_error:
                logger.error(f"Orphaned blob left at {path}: {cleanup_error}")
            self._audit("image_upload", actor_id, success=False, path=path)
            raise

        logger.info(f"Image {record.id} stored at {record.path}")
        self._audit("image_upload", actor_id, record.id, type=image_type, path=record.path)
        return record

    def upload_base64(self, payload: str, image_type: str, uploaded_to: int, actor_id: int) -> ImageRecord:
        data, extension = decode_base64_payload(payload)
        filename = f"drawing-{actor_id}-{int(self.clock().timestamp())}.{extension}"
        return self.upload(data, filename, image_type, uploaded_to, actor_id)

    def replace_drawing(self, image_id: int, payload: str, actor_id: int) -> ImageRecord:
        record = self.get(image_id)
        data, _ = decode_base64_payload(payload)
        self._check_content(data)

        self.blob_store.write(record.path, data)
        updated = self.image_repo.update(image_id, actor_id)
        if updated is None:
            raise NotFound(f"Image {image_id} not found")

        logger.info(f"Image {image_id} content replaced at {updated.path}")
        self._audit("image_replace", actor_id, image_id, path=updated.path)
        return updated

    def delete(self, image_id: int, actor_id: Optional[int] = None) -> None:
        record = self.get(image_id)
        # Keep the content so the blob can be restored if the record delete fails
        try:
            content = self.blob_store.read(record.path)
        except NotFound:
            content = None
        try:
            self.blob_store.delete(record.path)
        except IOFailure:
            self._audit("image_delete", actor_id, image_id, success=False, path=record.path)
            raise
        try:
            self.image_repo.delete(image_id)
        except Exception:
            if content is not None:
                try:
                    self.blob_store.write(record.path, content)
                except IOFailure as restore_error:
                    logger.error(f"Could not restore blob {record.path} for image {image_id}: {restore_error}")
            self._audit("image_delete", actor_id, image_id, success=False, path=record.path)
            raise

        logger.info(f"Image {image_id} deleted")
        self._audit("image_delete", actor_id, image_id, path=record.path)

    def get_base64(self, image_id: int) -> str:
        record = self.get(image_id)
        return base64.b64encode(self.blob_store.read(record.path)).decode("ascii")

    def list_images(self, image_type: str, uploaded_to: Optional[int] = None, page: int = 0, count: int = 24) -> Tuple[List[ImageRecord], bool]:
        self._check_type(image_type)
        if page < 0 or count < 1:
            raise ValidationError("Invalid pagination parameters")
        return self.image_repo.list_by_type(image_type, uploaded_to=uploaded_to, page=page, count=count)
