"""
系统公告模型

Announcement：管理员发布的公告
AnnouncementRead：用户已读记录，没有记录即未读
"""
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint, and_, or_,
)
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.datetime_utils import utc_now


class ContentType:
    MARKDOWN = "markdown"
    HTML = "html"
    URL = "url"

    ALL = (MARKDOWN, HTML, URL)


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    content_type = Column(String(20), nullable=False, default=ContentType.MARKDOWN)
    priority = Column(Integer, nullable=False, default=0, index=True)  # 越大越靠前
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    published_at = Column(DateTime, nullable=True, index=True)  # NULL 表示立即发布
    expires_at = Column(DateTime, nullable=True, index=True)  # NULL 表示永不过期
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    reads = relationship(
        "AnnouncementRead", back_populates="announcement",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_announcement_feed_order", "priority", "created_at", "id"),
    )

    @classmethod
    def visible_clause(cls, now):
        """用户可见：启用、已发布、未过期"""
        return and_(
            cls.is_active.is_(True),
            or_(cls.published_at.is_(None), cls.published_at <= now),
            or_(cls.expires_at.is_(None), cls.expires_at > now),
        )

    @classmethod
    def feed_order(cls):
        """稳定排序，id 兜底保证分页不重不漏"""
        return (cls.priority.desc(), cls.created_at.desc(), cls.id.desc())

    def __repr__(self):
        return f"<Announcement {self.id}: {self.title}>"


class AnnouncementRead(Base):
    __tablename__ = "announcement_reads"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    announcement_id = Column(
        Integer, ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    read_at = Column(DateTime, nullable=False, default=utc_now)  # 首次标记时间，之后不再更新

    user = relationship("User", back_populates="announcement_reads")
    announcement = relationship("Announcement", back_populates="reads")

    __table_args__ = (
        UniqueConstraint("user_id", "announcement_id", name="uq_announcement_read_user"),
    )
