"""
公告管理 API
仅管理员可访问
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.auth import get_current_admin
from app.models.user import User
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementPage,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from app.services.announcement_admin_service import AnnouncementAdminService
from app.utils.pagination import total_pages

router = APIRouter(prefix="/api/admin/announcements", tags=["公告管理"])


@router.get("", response_model=AnnouncementPage)
def list_announcements(
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """获取全部公告（含已停用），不含已读信息"""
    if page_size is None:
        page_size = settings.ANNOUNCEMENT_DEFAULT_PAGE_SIZE
    items, total = AnnouncementAdminService(db).list_page(page, page_size)
    return {
        "items": [AnnouncementResponse.model_validate(a) for a in items],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
    }


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
def get_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """获取公告详情"""
    return AnnouncementAdminService(db).get(announcement_id)


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """创建公告"""
    return AnnouncementAdminService(db).create(payload)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """更新公告（部分字段）"""
    return AnnouncementAdminService(db).update(announcement_id, payload)


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(
    announcement_id: int,
    purge: bool = Query(False, description="物理删除并清理已读记录；默认仅停用"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """删除公告（默认停用）"""
    AnnouncementAdminService(db).remove(announcement_id, purge=purge)
    return None
