import logging
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import Image
from .....application.ports.image_repo import ImageRecordRepository, ImageRecord
from .....exceptions import PersistenceError

logger = logging.getLogger(__name__)


class SqlImageRepository(ImageRecordRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_record(self, image: Image) -> ImageRecord:
        return ImageRecord(
            id=image.id,
            name=image.name,
            type=image.type,
            path=image.path,
            url=image.url,
            uploaded_to=image.uploaded_to,
            created_by=image.created_by,
            updated_by=image.updated_by,
            created_at=image.created_at,
            updated_at=image.updated_at,
        )

    def _fail(self, action: str, e: Exception) -> PersistenceError:
        logger.error(f"Error during image {action}: {e}")
        self.session.rollback()
        return PersistenceError(f"Failed to {action} image record")

    def create(self, name: str, image_type: str, path: str, url: str, uploaded_to: int, actor_id: int) -> ImageRecord:
        now = datetime.utcnow()
        image = Image(
            name=name,
            type=image_type,
            path=path,
            url=url,
            uploaded_to=uploaded_to or 0,
            created_by=actor_id,
            updated_by=actor_id,
            created_at=now,
            updated_at=now,
        )
        try:
            self.session.add(image)
            self.session.commit()
            self.session.refresh(image)
        except SQLAlchemyError as e:
            raise self._fail("create", e) from e
        return self._to_record(image)

    def get_by_id(self, image_id: int) -> Optional[ImageRecord]:
        try:
            image = self.session.get(Image, image_id)
        except SQLAlchemyError as e:
            raise self._fail("load", e) from e
        return self._to_record(image) if image else None

    def find_first_by_type(self, image_type: str) -> Optional[ImageRecord]:
        try:
            image = self.session.exec(
                select(Image).where(Image.type == image_type).order_by(Image.id)
            ).first()
        except SQLAlchemyError as e:
            raise self._fail("load", e) from e
        return self._to_record(image) if image else None

    def path_exists(self, path: str) -> bool:
        try:
            return self.session.exec(select(Image.id).where(Image.path == path)).first() is not None
        except SQLAlchemyError as e:
            raise self._fail("load", e) from e

    def update(self, image_id: int, actor_id: int) -> Optional[ImageRecord]:
        try:
            image = self.session.get(Image, image_id)
            if not image:
                return None
            image.updated_by = actor_id
            image.updated_at = datetime.utcnow()
            self.session.add(image)
            self.session.commit()
            self.session.refresh(image)
        except SQLAlchemyError as e:
            raise self._fail("update", e) from e
        return self._to_record(image)

    def delete(self, image_id: int) -> bool:
        try:
            image = self.session.get(Image, image_id)
            if not image:
                return False
            self.session.delete(image)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e
        return True

    def list_by_type(self, image_type: str, uploaded_to: Optional[int] = None, page: int = 0, count: int = 24) -> Tuple[List[ImageRecord], bool]:
        query = select(Image).where(Image.type == image_type)
        if uploaded_to is not None:
            query = query.where(Image.uploaded_to == uploaded_to)
        query = query.order_by(Image.created_at.desc(), Image.id.desc()).offset(page * count).limit(count + 1)
        try:
            rows = self.session.exec(query).all()
        except SQLAlchemyError as e:
            raise self._fail("list", e) from e
        return [self._to_record(r) for r in rows[:count]], len(rows) > count
