"""
公告已读状态查询

未读 = 用户可见（启用、已发布、未过期） 且 当前用户没有已读记录。
/unread、列表的 unread_only 过滤、未读数 三个入口共用同一个查询条件。
本服务只读，不修改任何数据。
"""
import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from app.config import settings
from app.models.announcement import Announcement, AnnouncementRead
from app.schemas.announcement import UserAnnouncementView
from app.services.announcement_store import storage_guard
from app.utils.datetime_utils import utc_now
from app.utils.pagination import validate_pagination

logger = logging.getLogger(__name__)


def to_user_view(announcement: Announcement, read_at) -> UserAnnouncementView:
    return UserAnnouncementView(
        id=announcement.id,
        title=announcement.title,
        content=announcement.content,
        content_type=announcement.content_type,
        priority=announcement.priority,
        published_at=announcement.published_at,
        created_at=announcement.created_at,
        is_read=read_at is not None,
        read_at=read_at,
    )


class ReadStateService:
    """按用户计算公告已读/未读视图"""

    def __init__(self, db: Session, now_fn: Callable = utc_now):
        self.db = db
        self.now_fn = now_fn

    def _read_join(self, user_id: int):
        return and_(
            AnnouncementRead.announcement_id == Announcement.id,
            AnnouncementRead.user_id == user_id,
        )

    def _feed_query(self, user_id: int, unread_only: bool):
        query = self.db.query(Announcement, AnnouncementRead.read_at).outerjoin(
            AnnouncementRead, self._read_join(user_id)
        ).filter(Announcement.visible_clause(self.now_fn()))
        if unread_only:
            query = query.filter(AnnouncementRead.id.is_(None))
        return query

    def unread_for(self, user_id: int) -> List[UserAnnouncementView]:
        """全部未读公告（不分页，受 ANNOUNCEMENT_UNREAD_LIMIT 上限保护）"""
        limit = settings.ANNOUNCEMENT_UNREAD_LIMIT
        with storage_guard(self.db, "query unread announcements"):
            rows = self._feed_query(user_id, unread_only=True).order_by(
                *Announcement.feed_order()
            ).limit(limit + 1).all()
        if len(rows) > limit:
            rows = rows[:limit]
            logger.warning(f"用户 {user_id} 未读公告超过上限 {limit}，结果已截断")
        return [to_user_view(a, read_at) for a, read_at in rows]

    def list_for(
        self,
        user_id: int,
        unread_only: bool = False,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Tuple[List[UserAnnouncementView], int]:
        """可见公告分页列表，附带已读标记"""
        offset, limit = validate_pagination(page, page_size)
        with storage_guard(self.db, "list user announcements"):
            query = self._feed_query(user_id, unread_only)
            total = query.count()
            rows = query.order_by(*Announcement.feed_order()).offset(offset).limit(limit).all()
        return [to_user_view(a, read_at) for a, read_at in rows], total

    def unread_count(self, user_id: int) -> int:
        """未读数量（铃铛角标）"""
        with storage_guard(self.db, "count unread announcements"):
            count = self.db.query(func.count(Announcement.id)).outerjoin(
                AnnouncementRead, self._read_join(user_id)
            ).filter(
                Announcement.visible_clause(self.now_fn()),
                AnnouncementRead.id.is_(None),
            ).scalar()
        return count or 0
