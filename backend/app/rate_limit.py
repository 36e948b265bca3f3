"""
速率限制

使用客户端 IP 作为限制键，main.py 注册 RateLimitExceeded 处理器。
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
