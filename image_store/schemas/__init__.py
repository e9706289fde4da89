# Schemas package (re-export feature modules for stable imports)
from .images.image import (
    ImageResponse,
    DrawingUploadRequest,
    DrawingReplaceRequest,
    Base64ImageResponse,
    ImageListResponse,
)

__all__ = [
    "ImageResponse",
    "DrawingUploadRequest",
    "DrawingReplaceRequest",
    "Base64ImageResponse",
    "ImageListResponse",
]
