from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from app.db.session import get_db
from app.api.deps import get_caller, require_role
from app.core.security import CallerContext
from app.models.user import UserRole
from app.schemas.gallery import GalleryCreate, GalleryContentChange, Gallery as GallerySchema
from app.services import galleries

router = APIRouter()

creator_only = require_role(UserRole.CREATOR.value)


@router.get("/creator/{creator_id}", response_model=List[GallerySchema])
def list_creator_galleries(
    creator_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(get_caller)
):
    return galleries.list_galleries(db, creator_id)


@router.post("", response_model=GallerySchema, status_code=status.HTTP_201_CREATED)
def create_gallery(
    body: GalleryCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(creator_only)
):
    return galleries.create_gallery(db, caller, body.title)


@router.post("/{gallery_id}/content", response_model=GallerySchema)
def add_content(
    gallery_id: UUID,
    body: GalleryContentChange,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(creator_only)
):
    return galleries.add_content_to_gallery(db, caller, gallery_id, body.content_id)


@router.delete("/{gallery_id}/content/{content_id}", response_model=GallerySchema)
def remove_content(
    gallery_id: UUID,
    content_id: str,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(creator_only)
):
    return galleries.remove_content_from_gallery(db, caller, gallery_id, content_id)
