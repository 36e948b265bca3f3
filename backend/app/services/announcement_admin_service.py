"""
公告管理服务（管理端 CRUD）

- 创建/更新只改 announcements，不触碰任何已读记录
- 删除默认是停用（is_active=False），管理端列表仍可见；
  purge=True 才物理删除并级联清理已读记录
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.exceptions import ValidationError
from app.models.announcement import Announcement, ContentType
from app.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from app.services.announcement_store import AnnouncementStore
from app.utils.datetime_utils import to_naive_utc

logger = logging.getLogger(__name__)


def _require_text(field: str, value: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} must not be empty")
    return value.strip()


def _check_content_type(value: str) -> str:
    if value not in ContentType.ALL:
        raise ValidationError(f"content_type must be one of {', '.join(ContentType.ALL)}")
    return value


def _check_window(published_at: Optional[datetime], expires_at: Optional[datetime]) -> None:
    if published_at is not None and expires_at is not None and expires_at <= published_at:
        raise ValidationError("expires_at must be later than published_at")


class AnnouncementAdminService:
    """公告管理"""

    def __init__(self, db: Session):
        self.store = AnnouncementStore(db)

    def create(self, payload: AnnouncementCreate) -> Announcement:
        published_at = to_naive_utc(payload.published_at) if payload.published_at else None
        expires_at = to_naive_utc(payload.expires_at) if payload.expires_at else None
        _check_window(published_at, expires_at)

        data = {
            "title": _require_text("title", payload.title),
            "content": _require_text("content", payload.content),
            "content_type": _check_content_type(payload.content_type or ContentType.MARKDOWN),
            "priority": payload.priority,
            "is_active": payload.is_active,
            "published_at": published_at,
            "expires_at": expires_at,
        }
        announcement = self.store.create(data)
        logger.info(f"创建公告: id={announcement.id}, title={announcement.title}")
        return announcement

    def get(self, announcement_id: int) -> Announcement:
        return self.store.get(announcement_id)

    def list_page(self, page: int, page_size: int) -> Tuple[List[Announcement], int]:
        return self.store.list_page(page, page_size)

    def update(self, announcement_id: int, payload: AnnouncementUpdate) -> Announcement:
        raw = payload.model_dump(exclude_unset=True)
        clear_published_at = raw.pop("clear_published_at", False)
        clear_expires_at = raw.pop("clear_expires_at", False)
        # null 视为未提供；清空时间字段请用 clear_* 标记
        fields: Dict[str, Any] = {k: v for k, v in raw.items() if v is not None}

        if "title" in fields:
            fields["title"] = _require_text("title", fields["title"])
        if "content" in fields:
            fields["content"] = _require_text("content", fields["content"])
        if "content_type" in fields:
            _check_content_type(fields["content_type"])
        for key in ("published_at", "expires_at"):
            if key in fields:
                fields[key] = to_naive_utc(fields[key])
        if clear_published_at:
            fields["published_at"] = None
        if clear_expires_at:
            fields["expires_at"] = None

        current = self.store.get(announcement_id)
        _check_window(
            fields.get("published_at", current.published_at),
            fields.get("expires_at", current.expires_at),
        )

        announcement = self.store.update(announcement_id, fields)
        logger.info(f"更新公告: id={announcement_id}, fields={sorted(fields)}")
        return announcement

    def remove(self, announcement_id: int, purge: bool = False) -> None:
        if purge:
            self.store.delete(announcement_id)
            logger.warning(f"物理删除公告: id={announcement_id}")
        else:
            self.store.update(announcement_id, {"is_active": False})
            logger.info(f"停用公告: id={announcement_id}")
