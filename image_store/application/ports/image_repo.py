from typing import List, Optional, Protocol, Tuple
from dataclasses import dataclass
from datetime import datetime


@dataclass
class ImageRecord:
    id: int
    name: str
    type: str
    path: str
    url: str
    uploaded_to: int
    created_by: int
    updated_by: int
    created_at: datetime
    updated_at: datetime


class ImageRecordRepository(Protocol):
    def create(self, name: str, image_type: str, path: str, url: str, uploaded_to: int, actor_id: int) -> ImageRecord:
        ...

    def get_by_id(self, image_id: int) -> Optional[ImageRecord]:
        ...

    def find_first_by_type(self, image_type: str) -> Optional[ImageRecord]:
        ...

    def path_exists(self, path: str) -> bool:
        ...

    def update(self, image_id: int, actor_id: int) -> Optional[ImageRecord]:
        ...

    def delete(self, image_id: int) -> bool:
        ...

    def list_by_type(self, image_type: str, uploaded_to: Optional[int] = None, page: int = 0, count: int = 24) -> Tuple[List[ImageRecord], bool]:
        ...
