"""
公告服务异常

服务层抛出这些异常，由 main.py 中注册的处理器统一转换为 JSON 响应。
已读重复标记不是异常（见 MarkReadOutcome.ALREADY_READ）。
"""
from typing import Optional

from fastapi import status


class AnnouncementServiceError(Exception):
    """公告服务异常基类"""

    code = "ANNOUNCEMENT_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Announcement service error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(self.detail)


class AnnouncementNotFound(AnnouncementServiceError):
    code = "ANNOUNCEMENT_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Announcement not found"

    def __init__(self, announcement_id: Optional[int] = None, detail: Optional[str] = None):
        self.announcement_id = announcement_id
        if detail is None and announcement_id is not None:
            detail = f"Announcement {announcement_id} not found"
        super().__init__(detail)


class ValidationError(AnnouncementServiceError):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class StorageError(AnnouncementServiceError):
    code = "STORAGE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage unavailable"
