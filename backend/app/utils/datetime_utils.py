"""
时间工具
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """获取当前 UTC 时间（naive datetime，兼容 SQLite 和 jose）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """带时区的时间统一转换为 naive UTC；naive 时间视为已是 UTC"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
