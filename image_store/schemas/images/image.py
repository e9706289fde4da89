# image_store/schemas/images/image.py
from pydantic import BaseModel, ConfigDict
from typing import List
from datetime import datetime

class ImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    url: str
    path: str
    uploaded_to: int
    created_by: int
    updated_by: int
    created_at: datetime
    updated_at: datetime

class DrawingUploadRequest(BaseModel):
    image: str
    uploaded_to: int = 0

class DrawingReplaceRequest(BaseModel):
    image: str

class Base64ImageResponse(BaseModel):
    content: str

class ImageListResponse(BaseModel):
    images: List[ImageResponse]
    has_more: bool
