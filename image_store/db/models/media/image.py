# image_store/db/models/media/image.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
from sqlalchemy import Column, DateTime

class Image(SQLModel, table=True):
    __tablename__ = "images"
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    url: str = Field(max_length=512)
    path: str = Field(max_length=400, unique=True, index=True)
    type: str = Field(max_length=50, index=True)
    uploaded_to: int = Field(default=0, index=True)
    created_by: int
    updated_by: int
    # Naive UTC timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))
