# Models package (re-export feature modules for stable imports)
from .media.image import Image

__all__ = [
    "Image",
]
