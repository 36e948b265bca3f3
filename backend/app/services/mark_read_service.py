"""
公告标记已读

单条和批量走同一个逐条写入逻辑：
- 每个 (user_id, announcement_id) 用 savepoint + flush 做“乐观插入”，
  唯一约束冲突即视为已读，原记录（含 read_at）保持不变
- 每条单独提交，批量中某条失败不会回滚其他已成功的条目
因此 N 次单条调用与一次批量调用最终得到相同的已读记录集合。
"""
import logging
from typing import Callable, Iterable, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import AnnouncementNotFound, ValidationError
from app.models.announcement import Announcement, AnnouncementRead
from app.schemas.announcement import MarkReadOutcome, MarkReadResult
from app.services.announcement_store import storage_guard
from app.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class MarkReadService:
    """标记已读"""

    def __init__(self, db: Session, now_fn: Callable = utc_now):
        self.db = db
        self.now_fn = now_fn

    def mark_read(self, user_id: int, announcement_id: int) -> MarkReadOutcome:
        """标记单条，公告不存在或对用户不可见时抛 AnnouncementNotFound"""
        outcome = self._mark_one(user_id, announcement_id)
        if outcome == MarkReadOutcome.NOT_FOUND:
            raise AnnouncementNotFound(announcement_id)
        return outcome

    def mark_read_bulk(self, user_id: int, announcement_ids: Iterable[int]) -> List[MarkReadResult]:
        """批量标记，逐条返回结果（重复 id 只处理一次，保持首次出现顺序）"""
        ids = list(dict.fromkeys(announcement_ids))
        max_ids = settings.ANNOUNCEMENT_MAX_BULK_IDS
        if len(ids) > max_ids:
            raise ValidationError(f"At most {max_ids} announcement ids per request, got {len(ids)}")

        results = [
            MarkReadResult(announcement_id=announcement_id, outcome=self._mark_one(user_id, announcement_id))
            for announcement_id in ids
        ]
        logger.info(
            "批量标记已读完成",
            extra={
                "user_id": user_id,
                "requested": len(ids),
                "marked": sum(1 for r in results if r.outcome == MarkReadOutcome.MARKED),
                "not_found": sum(1 for r in results if r.outcome == MarkReadOutcome.NOT_FOUND),
            },
        )
        return results

    def _is_read(self, user_id: int, announcement_id: int) -> bool:
        return self.db.query(AnnouncementRead.id).filter(
            AnnouncementRead.user_id == user_id,
            AnnouncementRead.announcement_id == announcement_id,
        ).first() is not None

    def _mark_one(self, user_id: int, announcement_id: int) -> MarkReadOutcome:
        now = self.now_fn()
        with storage_guard(self.db, "mark announcement read"):
            visible = self.db.query(Announcement.id).filter(
                Announcement.id == announcement_id,
                Announcement.visible_clause(now),
            ).first()
            if visible is None:
                self.db.rollback()
                return MarkReadOutcome.NOT_FOUND

            try:
                with self.db.begin_nested():
                    self.db.add(AnnouncementRead(
                        user_id=user_id,
                        announcement_id=announcement_id,
                        read_at=now,
                    ))
                    self.db.flush()
                outcome = MarkReadOutcome.MARKED
            except IntegrityError:
                # 唯一约束冲突 = 已读；回查确认不是公告被并发删除导致的外键冲突
                if self._is_read(user_id, announcement_id):
                    outcome = MarkReadOutcome.ALREADY_READ
                else:
                    self.db.rollback()
                    return MarkReadOutcome.NOT_FOUND
            self.db.commit()
        return outcome
