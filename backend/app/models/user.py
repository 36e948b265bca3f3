"""
用户模型
"""
import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.datetime_utils import utc_now


class UserRole(str, enum.Enum):
    """用户角色枚举"""
    ADMIN = "admin"  # 管理员 - 发布/维护公告
    USER = "user"    # 普通用户 - 查看公告、标记已读


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    announcement_reads = relationship(
        "AnnouncementRead", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        """是否为管理员"""
        return self.role == UserRole.ADMIN
