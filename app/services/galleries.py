"""
Creator galleries: an ordered list of content ids per gallery.

content_ids is rewritten whole on every change. The row's version column
makes a concurrent writer's flush fail (StaleDataError) instead of silently
dropping the other writer's change; callers see a ConflictError and retry.
"""
import logging
from typing import List
import uuid

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import AuthorizationError, ConflictError, ForbiddenError
from app.core.security import CallerContext
from app.models.gallery import Gallery
from app.models.user import UserRole

logger = logging.getLogger(__name__)


def create_gallery(db: Session, caller: CallerContext, title: str) -> Gallery:
    if caller.role != UserRole.CREATOR.value:
        raise ForbiddenError("Access denied. Creator role required.")
    gallery = Gallery(creator_id=caller.id, title=title, content_ids=[])
    db.add(gallery)
    db.commit()
    db.refresh(gallery)
    return gallery


def list_galleries(db: Session, creator_id: uuid.UUID) -> List[Gallery]:
    return db.query(Gallery).filter(Gallery.creator_id == creator_id).order_by(Gallery.created_at).all()


def _get_owned_gallery(db: Session, gallery_id: uuid.UUID, caller: CallerContext) -> Gallery:
    gallery = db.get(Gallery, gallery_id)
    if not gallery or gallery.creator_id != caller.id:
        raise AuthorizationError("Gallery not found or you are not authorized to modify it.")
    return gallery


def _write_content_ids(db: Session, gallery: Gallery, content_ids: List[str]) -> Gallery:
    # Assign a new list so the JSON column is flagged dirty
    gallery.content_ids = content_ids
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"[GALLERY] Concurrent update on gallery {gallery.id}")
        raise ConflictError("Gallery was modified by another request. Reload and try again.")
    db.refresh(gallery)
    return gallery


def add_content_to_gallery(db: Session, caller: CallerContext, gallery_id: uuid.UUID, content_id: str) -> Gallery:
    gallery = _get_owned_gallery(db, gallery_id, caller)
    if content_id in gallery.content_ids:
        return gallery
    return _write_content_ids(db, gallery, list(gallery.content_ids) + [content_id])


def remove_content_from_gallery(db: Session, caller: CallerContext, gallery_id: uuid.UUID, content_id: str) -> Gallery:
    gallery = _get_owned_gallery(db, gallery_id, caller)
    if content_id not in gallery.content_ids:
        return gallery
    return _write_content_ids(db, gallery, [c for c in gallery.content_ids if c != content_id])
