"""
应用配置
"""
import json
from pathlib import Path
from typing import Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_str_list(value: Any) -> List[str]:
    """Parse list-like env values.

    Supports:
    - JSON list: '["http://a","http://b"]'
    - comma-separated: 'http://a,http://b'
    - already-a-list
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(x).strip() for x in value if str(x).strip()]
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return []
        if s.startswith("[") and s.endswith("]"):
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return [str(x).strip() for x in parsed if str(x).strip()]
        return [part.strip() for part in s.split(",") if part.strip()]
    return [str(value).strip()] if str(value).strip() else []


class Settings(BaseSettings):
    # 数据库配置
    DATABASE_URL: str = "sqlite:///./announcements.db"

    # JWT配置
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24小时

    # CORS配置
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]
    # 本地开发任意端口
    CORS_ORIGIN_REGEX: str = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    # 启动时自动建表（生产环境建议关闭，改用 alembic）
    AUTO_CREATE_TABLES: bool = True

    # 速率限制
    RATE_LIMIT_ENABLED: bool = True
    READ_ALL_RATE_LIMIT: str = "30/minute"

    # ===== 公告 =====
    ANNOUNCEMENT_DEFAULT_PAGE_SIZE: int = 20
    ANNOUNCEMENT_MAX_PAGE_SIZE: int = 100
    # /unread 不分页，只做硬上限保护（角标/弹窗用）
    ANNOUNCEMENT_UNREAD_LIMIT: int = 200
    ANNOUNCEMENT_MAX_BULK_IDS: int = 500

    # 日志
    LOG_DIR: str = str(Path(__file__).resolve().parents[1] / "logs")
    LOG_FILE_ENABLED: bool = True

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _validate_cors_origins(cls, v: Any) -> List[str]:
        return _parse_str_list(v)

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[1] / ".env"),  # backend/.env
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
