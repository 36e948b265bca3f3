"""
数据模型
"""
from app.models.user import User, UserRole
from app.models.announcement import Announcement, AnnouncementRead, ContentType

__all__ = [
    "User",
    "UserRole",
    "Announcement",
    "AnnouncementRead",
    "ContentType",
]
