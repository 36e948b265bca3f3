"""
测试公告管理服务：字段校验、部分更新、停用与物理删除
"""
from datetime import timedelta

import pytest

from app.exceptions import AnnouncementNotFound, ValidationError
from app.models.announcement import Announcement, AnnouncementRead, ContentType
from app.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from app.services.announcement_admin_service import AnnouncementAdminService
from app.services.mark_read_service import MarkReadService
from app.utils.datetime_utils import utc_now

from conftest import make_announcement


class TestCreate:
    """测试创建公告"""

    def test_defaults(self, db):
        a1 = AnnouncementAdminService(db).create(AnnouncementCreate(title="  维护通知 ", content="今晚维护"))
        assert a1.title == "维护通知"
        assert a1.content_type == ContentType.MARKDOWN
        assert a1.priority == 0
        assert a1.is_active is True
        assert a1.created_at is not None

    @pytest.mark.parametrize("title,content", [("", "x"), ("   ", "x"), ("t", ""), ("t", "  ")])
    def test_blank_text_rejected(self, db, title, content):
        with pytest.raises(ValidationError):
            AnnouncementAdminService(db).create(AnnouncementCreate(title=title, content=content))
        assert db.query(Announcement).count() == 0

    def test_unknown_content_type_rejected(self, db):
        with pytest.raises(ValidationError):
            make_announcement(db, "A1", content_type="pdf")

    def test_expires_before_publish_rejected(self, db):
        now = utc_now()
        with pytest.raises(ValidationError):
            make_announcement(db, "A1", published_at=now, expires_at=now - timedelta(hours=1))


class TestUpdate:
    """测试部分更新"""

    def test_only_given_fields_change(self, db):
        a1 = make_announcement(db, "A1", priority=3)
        updated = AnnouncementAdminService(db).update(a1.id, AnnouncementUpdate(title="A1 v2"))
        assert updated.title == "A1 v2"
        assert updated.priority == 3
        assert updated.content == "A1 内容"

    def test_update_keeps_read_markers(self, db, user):
        """编辑公告不会让已读用户重新变为未读"""
        a1 = make_announcement(db, "A1")
        MarkReadService(db).mark_read(user.id, a1.id)
        AnnouncementAdminService(db).update(a1.id, AnnouncementUpdate(content="修订后的内容"))
        assert db.query(AnnouncementRead).filter(AnnouncementRead.announcement_id == a1.id).count() == 1

    def test_window_checked_against_stored_value(self, db):
        now = utc_now()
        a1 = make_announcement(db, "A1", published_at=now)
        with pytest.raises(ValidationError):
            AnnouncementAdminService(db).update(a1.id, AnnouncementUpdate(expires_at=now - timedelta(days=1)))

    def test_clear_expires_at(self, db):
        a1 = make_announcement(db, "A1", expires_at=utc_now() + timedelta(days=1))
        updated = AnnouncementAdminService(db).update(a1.id, AnnouncementUpdate(clear_expires_at=True))
        assert updated.expires_at is None

    def test_missing(self, db):
        with pytest.raises(AnnouncementNotFound):
            AnnouncementAdminService(db).update(404, AnnouncementUpdate(title="x"))


class TestRemove:
    """测试删除"""

    def test_default_deactivates(self, db, user):
        a1 = make_announcement(db, "A1")
        MarkReadService(db).mark_read(user.id, a1.id)
        AnnouncementAdminService(db).remove(a1.id)

        stored = AnnouncementAdminService(db).get(a1.id)
        assert stored.is_active is False
        assert db.query(AnnouncementRead).count() == 1

    def test_purge_removes_markers(self, db, user, other_user):
        a1 = make_announcement(db, "A1")
        a2 = make_announcement(db, "A2")
        MarkReadService(db).mark_read_bulk(user.id, [a1.id, a2.id])
        MarkReadService(db).mark_read(other_user.id, a1.id)

        AnnouncementAdminService(db).remove(a1.id, purge=True)

        with pytest.raises(AnnouncementNotFound):
            AnnouncementAdminService(db).get(a1.id)
        remaining = db.query(AnnouncementRead).all()
        assert [(r.user_id, r.announcement_id) for r in remaining] == [(user.id, a2.id)]

    def test_missing(self, db):
        with pytest.raises(AnnouncementNotFound):
            AnnouncementAdminService(db).remove(404)
