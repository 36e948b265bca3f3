"""
分页参数校验

策略：page 从 1 开始，page_size 必须在 [1, ANNOUNCEMENT_MAX_PAGE_SIZE] 内，
越界直接拒绝（ValidationError），不做静默截断。
"""
from typing import Optional, Tuple

from app.config import settings
from app.exceptions import ValidationError


def validate_pagination(page: int, page_size: Optional[int] = None) -> Tuple[int, int]:
    """校验分页参数，返回 (offset, limit)"""
    if page_size is None:
        page_size = settings.ANNOUNCEMENT_DEFAULT_PAGE_SIZE
    max_size = settings.ANNOUNCEMENT_MAX_PAGE_SIZE
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        raise ValidationError(f"page must be an integer >= 1, got {page!r}")
    if not isinstance(page_size, int) or isinstance(page_size, bool) or not 1 <= page_size <= max_size:
        raise ValidationError(f"page_size must be between 1 and {max_size}, got {page_size!r}")
    return (page - 1) * page_size, page_size


def total_pages(total: int, page_size: int) -> int:
    return (total + page_size - 1) // page_size if page_size else 0
