from pydantic import BaseModel
from datetime import datetime
from typing import List
import uuid


class GalleryCreate(BaseModel):
    title: str


class GalleryContentChange(BaseModel):
    content_id: str


class Gallery(BaseModel):
    id: uuid.UUID
    creator_id: uuid.UUID
    title: str
    content_ids: List[str]
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
