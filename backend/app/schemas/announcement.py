"""
公告相关的Pydantic模型
"""
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, PositiveInt


class AnnouncementCreate(BaseModel):
    title: str = Field(..., max_length=255)
    content: str
    content_type: Optional[str] = None  # 默认 markdown
    priority: int = 0
    is_active: bool = True
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class AnnouncementUpdate(BaseModel):
    """部分更新：只有请求里出现的字段才会被修改"""
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    content_type: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    # 显式清空时间字段
    clear_published_at: bool = False
    clear_expires_at: bool = False


class AnnouncementResponse(BaseModel):
    """管理端视图，不含任何已读信息"""
    id: int
    title: str
    content: str
    content_type: str
    priority: int
    is_active: bool
    published_at: Optional[datetime]
    expires_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AnnouncementPage(BaseModel):
    items: List[AnnouncementResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class UserAnnouncementView(BaseModel):
    """用户端视图：公告 + 当前用户的已读状态"""
    id: int
    title: str
    content: str
    content_type: str
    priority: int
    published_at: Optional[datetime]
    created_at: datetime
    is_read: bool
    read_at: Optional[datetime] = None


class UserAnnouncementPage(BaseModel):
    items: List[UserAnnouncementView]
    total: int
    page: int
    page_size: int
    total_pages: int


class UnreadCountResponse(BaseModel):
    count: int


class MarkReadOutcome(str, enum.Enum):
    MARKED = "marked"
    ALREADY_READ = "already_read"
    NOT_FOUND = "not_found"


class MarkReadBulkRequest(BaseModel):
    announcement_ids: List[PositiveInt] = Field(default_factory=list)


class MarkReadResult(BaseModel):
    announcement_id: int
    outcome: MarkReadOutcome


class MarkReadBulkResponse(BaseModel):
    results: List[MarkReadResult]
    marked: int
    already_read: int
    not_found: int

    @classmethod
    def from_results(cls, results: List[MarkReadResult]) -> "MarkReadBulkResponse":
        def count(outcome):
            return sum(1 for r in results if r.outcome == outcome)

        return cls(
            results=results,
            marked=count(MarkReadOutcome.MARKED),
            already_read=count(MarkReadOutcome.ALREADY_READ),
            not_found=count(MarkReadOutcome.NOT_FOUND),
        )
