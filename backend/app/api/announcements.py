"""
公告 API（用户端）

所有接口都以当前登录用户为准，不接受请求中的 user_id。
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.auth import get_current_user
from app.models.user import User
from app.rate_limit import limiter
from app.schemas.announcement import (
    MarkReadBulkRequest,
    MarkReadBulkResponse,
    UnreadCountResponse,
    UserAnnouncementPage,
    UserAnnouncementView,
)
from app.services.mark_read_service import MarkReadService
from app.services.read_state_service import ReadStateService
from app.utils.pagination import total_pages

router = APIRouter(prefix="/api/announcements", tags=["announcements"])


@router.get("", response_model=UserAnnouncementPage)
def list_announcements(
    unread_only: bool = Query(False, description="只显示未读"),
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """获取公告列表（分页，附带已读标记）"""
    if page_size is None:
        page_size = settings.ANNOUNCEMENT_DEFAULT_PAGE_SIZE
    items, total = ReadStateService(db).list_for(
        current_user.id, unread_only=unread_only, page=page, page_size=page_size
    )
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
    }


@router.get("/unread", response_model=List[UserAnnouncementView])
def get_unread_announcements(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """获取全部未读公告（登录弹窗/通知栏用）"""
    return ReadStateService(db).unread_for(current_user.id)


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """获取未读数量（铃铛角标）"""
    return {"count": ReadStateService(db).unread_count(current_user.id)}


@router.post("/read-all", response_model=MarkReadBulkResponse)
@limiter.limit(settings.READ_ALL_RATE_LIMIT)
def mark_all_as_read(
    request: Request,  # 速率限制需要 Request 对象
    payload: MarkReadBulkRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """批量标记已读，逐条返回结果（marked / already_read / not_found）"""
    results = MarkReadService(db).mark_read_bulk(current_user.id, payload.announcement_ids)
    return MarkReadBulkResponse.from_results(results)


@router.post("/{announcement_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_as_read(
    announcement_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """标记单条为已读，重复标记同样返回成功"""
    MarkReadService(db).mark_read(current_user.id, announcement_id)
    return None
