import os
import logging
import tempfile
from typing import Optional

from ...core.config import settings
from ...application.ports.blob_store import BlobStore
from ...exceptions import InvalidName, IOFailure, NotFound, PathTaken

logger = logging.getLogger(__name__)


class LocalBlobStore(BlobStore):
    """Filesystem blob store. Storage paths such as /uploads/images/... are resolved under root_dir."""

    def __init__(self, root_dir: Optional[str] = None) -> None:
        self.root_dir = os.path.abspath(root_dir or settings.PUBLIC_DIR)

    def absolute_path(self, path: str) -> str:
        full_path = os.path.normpath(os.path.join(self.root_dir, path.lstrip("/\\")))
        if os.path.commonpath([self.root_dir, full_path]) != self.root_dir or full_path == self.root_dir:
            raise InvalidName(f"Path escapes storage root: {path}")
        return full_path

    def _write_temp(self, full_path: str, data: bytes) -> str:
        dest_dir = os.path.dirname(full_path)
        os.makedirs(dest_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=dest_dir, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            os.unlink(tmp_path)
            raise
        return tmp_path

    def write(self, path: str, data: bytes) -> None:
        full_path = self.absolute_path(path)
        try:
            tmp_path = self._write_temp(full_path, data)
            try:
                os.replace(tmp_path, full_path)
            except OSError:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Error writing blob {path}: {e}")
            raise IOFailure(f"Failed to write {path}") from e

    def create(self, path: str, data: bytes) -> None:
        full_path = self.absolute_path(path)
        try:
            tmp_path = self._write_temp(full_path, data)
            try:
                # link() refuses to replace an existing name, so only one writer can claim a path
                os.link(tmp_path, full_path)
            finally:
                os.unlink(tmp_path)
        except FileExistsError as e:
            raise PathTaken(f"Path already taken: {path}") from e
        except OSError as e:
            logger.error(f"Error creating blob {path}: {e}")
            raise IOFailure(f"Failed to write {path}") from e

    def read(self, path: str) -> bytes:
        full_path = self.absolute_path(path)
        try:
            with open(full_path, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise NotFound(f"Image file not found: {path}") from e
        except OSError as e:
            logger.error(f"Error reading blob {path}: {e}")
            raise IOFailure(f"Failed to read {path}") from e

    def delete(self, path: str) -> None:
        full_path = self.absolute_path(path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error(f"Error deleting blob {path}: {e}")
            raise IOFailure(f"Failed to delete {path}") from e

    def exists(self, path: str) -> bool:
        return os.path.isfile(self.absolute_path(path))
