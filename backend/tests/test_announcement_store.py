"""
测试公告存储：分页、排序稳定性、级联删除、存储异常
"""
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import AnnouncementNotFound, StorageError, ValidationError
from app.models.announcement import Announcement, AnnouncementRead
from app.services.announcement_store import AnnouncementStore
from app.services.mark_read_service import MarkReadService

from conftest import make_announcement


class TestAnnouncementStore:
    """测试 AnnouncementStore"""

    def test_create_and_get(self, db):
        """创建后可按 id 取回，时间戳已填充"""
        store = AnnouncementStore(db)
        created = store.create({"title": "维护通知", "content": "今晚维护"})
        fetched = store.get(created.id)
        assert fetched.title == "维护通知"
        assert fetched.is_active is True
        assert fetched.content_type == "markdown"
        assert fetched.created_at is not None
        assert fetched.updated_at == fetched.created_at

    def test_get_missing_raises(self, db):
        """不存在的 id 抛 AnnouncementNotFound"""
        with pytest.raises(AnnouncementNotFound):
            AnnouncementStore(db).get(999)

    def test_update_refreshes_updated_at(self, db):
        """更新只改传入字段，并刷新 updated_at"""
        store = AnnouncementStore(db)
        created = store.create({"title": "旧标题", "content": "正文"})
        created_at = created.created_at
        updated = store.update(created.id, {"title": "新标题"})
        assert updated.title == "新标题"
        assert updated.content == "正文"
        assert updated.created_at == created_at
        assert updated.updated_at >= created_at

    def test_update_missing_raises(self, db):
        with pytest.raises(AnnouncementNotFound):
            AnnouncementStore(db).update(999, {"title": "x"})

    def test_update_rejects_unknown_field(self, db):
        store = AnnouncementStore(db)
        created = store.create({"title": "t", "content": "c"})
        with pytest.raises(ValueError):
            store.update(created.id, {"id": 42})

    def test_delete_cascades_read_markers(self, db, user, other_user):
        """物理删除同时清理所有用户的已读记录"""
        store = AnnouncementStore(db)
        a1 = make_announcement(db, "A1")
        a2 = make_announcement(db, "A2")
        MarkReadService(db).mark_read(user.id, a1.id)
        MarkReadService(db).mark_read(other_user.id, a1.id)
        MarkReadService(db).mark_read(user.id, a2.id)

        store.delete(a1.id)

        assert db.query(AnnouncementRead).filter(AnnouncementRead.announcement_id == a1.id).count() == 0
        assert db.query(AnnouncementRead).filter(AnnouncementRead.announcement_id == a2.id).count() == 1
        with pytest.raises(AnnouncementNotFound):
            store.get(a1.id)

    def test_delete_missing_raises(self, db):
        with pytest.raises(AnnouncementNotFound):
            AnnouncementStore(db).delete(999)


class TestListPage:
    """测试分页"""

    def test_pages_cover_every_row_exactly_once(self, db):
        """逐页拼接后每条公告恰好出现一次，且顺序与整页查询一致"""
        store = AnnouncementStore(db)
        for i in range(7):
            store.create({"title": f"公告{i}", "content": "c"})
        # 制造 created_at 完全相同的情况，依赖 id 兜底
        same_time = datetime(2026, 1, 1, 12, 0, 0)
        db.query(Announcement).update({"created_at": same_time})
        db.commit()

        collected = []
        for page in (1, 2, 3):
            items, total = store.list_page(page, 3)
            assert total == 7
            collected.extend(a.id for a in items)

        full, _ = store.list_page(1, 100)
        assert collected == [a.id for a in full]
        assert len(set(collected)) == 7
        assert collected == sorted(collected, reverse=True)

    def test_orders_by_priority_then_newest(self, db):
        store = AnnouncementStore(db)
        old = store.create({"title": "old", "content": "c"})
        pinned = store.create({"title": "pinned", "content": "c", "priority": 10})
        new = store.create({"title": "new", "content": "c"})
        db.query(Announcement).filter(Announcement.id == old.id).update(
            {"created_at": datetime(2026, 1, 1)}
        )
        db.query(Announcement).filter(Announcement.id == new.id).update(
            {"created_at": datetime(2026, 2, 1)}
        )
        db.commit()

        items, _ = store.list_page(1, 10)
        assert [a.id for a in items] == [pinned.id, new.id, old.id]

    def test_includes_inactive(self, db):
        """管理端分页不过滤停用公告"""
        store = AnnouncementStore(db)
        store.create({"title": "on", "content": "c"})
        store.create({"title": "off", "content": "c", "is_active": False})
        items, total = store.list_page(1, 10)
        assert total == 2
        assert {a.title for a in items} == {"on", "off"}

    def test_page_beyond_end_is_empty(self, db):
        store = AnnouncementStore(db)
        store.create({"title": "only", "content": "c"})
        items, total = store.list_page(5, 10)
        assert items == []
        assert total == 1

    @pytest.mark.parametrize("page,page_size", [(0, 10), (-1, 10), (1, 0), (1, 101), (1, -5)])
    def test_invalid_pagination_rejected(self, db, page, page_size):
        """非法分页参数直接拒绝，不做截断"""
        with pytest.raises(ValidationError):
            AnnouncementStore(db).list_page(page, page_size)


class TestStorageFailure:
    """测试存储异常"""

    def test_commit_failure_rolls_back_and_raises(self, db, monkeypatch):
        store = AnnouncementStore(db)

        def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", broken_commit)
        with pytest.raises(StorageError):
            store.create({"title": "t", "content": "c"})
        monkeypatch.undo()

        assert db.query(Announcement).count() == 0
