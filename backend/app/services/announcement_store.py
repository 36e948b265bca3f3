"""
公告存储

负责 announcements 表的增删改查，以及删除时级联清理 announcement_reads。
所有写操作在单个事务内完成，数据库异常统一回滚并转换为 StorageError。
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import AnnouncementNotFound, StorageError
from app.models.announcement import Announcement, AnnouncementRead
from app.utils.datetime_utils import utc_now
from app.utils.pagination import validate_pagination

logger = logging.getLogger(__name__)

# 允许通过 update 修改的列
UPDATABLE_FIELDS = {
    "title", "content", "content_type", "priority",
    "is_active", "published_at", "expires_at",
}


@contextmanager
def storage_guard(db: Session, action: str):
    """数据库异常 -> 回滚 + StorageError"""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[AnnouncementStore] {action} 失败: {e}", exc_info=True)
        raise StorageError(f"Storage failure during {action}") from e


class AnnouncementStore:
    """公告存储"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict[str, Any]) -> Announcement:
        now = utc_now()
        announcement = Announcement(**data)
        announcement.created_at = now
        announcement.updated_at = now
        with storage_guard(self.db, "create announcement"):
            self.db.add(announcement)
            self.db.commit()
            self.db.refresh(announcement)
        return announcement

    def get(self, announcement_id: int) -> Announcement:
        with storage_guard(self.db, "get announcement"):
            announcement = self.db.query(Announcement).filter(
                Announcement.id == announcement_id
            ).first()
        if announcement is None:
            raise AnnouncementNotFound(announcement_id)
        return announcement

    def update(self, announcement_id: int, fields: Dict[str, Any]) -> Announcement:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown announcement fields: {sorted(unknown)}")

        announcement = self.get(announcement_id)
        with storage_guard(self.db, "update announcement"):
            for key, value in fields.items():
                setattr(announcement, key, value)
            announcement.updated_at = utc_now()
            self.db.commit()
            self.db.refresh(announcement)
        return announcement

    def delete(self, announcement_id: int) -> None:
        """物理删除，同一事务内先删已读记录再删公告"""
        announcement = self.get(announcement_id)
        with storage_guard(self.db, "delete announcement"):
            removed_reads = self.db.query(AnnouncementRead).filter(
                AnnouncementRead.announcement_id == announcement_id
            ).delete(synchronize_session=False)
            self.db.delete(announcement)
            self.db.commit()
        logger.info(
            f"[AnnouncementStore] 已删除公告 {announcement_id}，级联删除已读记录 {removed_reads} 条"
        )

    def list_page(self, page: int, page_size: int) -> Tuple[List[Announcement], int]:
        """全部公告分页（不过滤启用状态），按 priority、created_at、id 倒序"""
        offset, limit = validate_pagination(page, page_size)
        with storage_guard(self.db, "list announcements"):
            query = self.db.query(Announcement)
            total = query.count()
            items = query.order_by(*Announcement.feed_order()).offset(offset).limit(limit).all()
        return items, total
