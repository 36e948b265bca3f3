"""
日志配置

功能:
- 控制台：人类可读格式
- 文件：结构化 JSON（app.log 全量，error.log 仅 WARNING 及以上），按大小轮转
- log_alert：带告警级别的日志
"""
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from app.config import settings

# LogRecord 自带属性，不计入 extra
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'asctime', 'taskName',
}


class StructuredFormatter(logging.Formatter):
    """结构化 JSON 日志格式化器

    输出格式:
    {
        "timestamp": "2024-01-15T10:30:15.123Z",
        "level": "INFO",
        "logger": "app.services.mark_read_service",
        "message": "Bulk mark read finished",
        "extra": { ... }  # 可选的额外字段
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno <= logging.DEBUG:
            log_data["location"] = f"{record.filename}:{record.lineno}"

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                extra_fields[key] = value
            except (TypeError, ValueError):
                extra_fields[key] = str(value)

        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """人类可读的日志格式化器（用于控制台）"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')

        color = self.COLORS.get(record.levelname, '')
        reset = self.RESET if color else ''

        logger_name = record.name
        if logger_name.startswith('app.'):
            logger_name = logger_name[4:]

        formatted = f"{timestamp} {color}{record.levelname:8}{reset} [{logger_name}] {record.getMessage()}"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def _rotating_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter())
    return handler


def setup_logging() -> logging.Logger:
    """配置根日志记录器，重复调用是安全的"""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(ReadableFormatter())
    root.addHandler(console_handler)

    if settings.LOG_FILE_ENABLED:
        log_dir = Path(settings.LOG_DIR)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            root.addHandler(_rotating_handler(log_dir / "app.log", logging.DEBUG))
            root.addHandler(_rotating_handler(log_dir / "error.log", logging.WARNING))
        except OSError as e:
            root.warning(f"无法创建文件日志处理器: {e}")

    # 第三方库降噪
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    return root


root_logger = setup_logging()


class AlertLevel:
    """告警级别常量"""
    P0_CRITICAL = "P0"  # 致命：服务宕机
    P1_URGENT = "P1"    # 紧急：功能异常
    P2_WARNING = "P2"   # 警告：需要关注


def log_alert(
    logger: logging.Logger,
    level: str,
    title: str,
    message: str,
    context: Optional[dict] = None,
    suggested_actions: Optional[list] = None
):
    """记录告警日志

    Args:
        logger: 日志记录器
        level: 告警级别 (P0/P1/P2)
        title: 告警标题
        message: 告警详情
        context: 上下文信息（问题定位）
        suggested_actions: 建议操作

    Example:
        log_alert(
            logger,
            AlertLevel.P1_URGENT,
            "公告存储不可用",
            "mark_read 写入失败",
            context={"path": "/api/announcements/read-all"},
            suggested_actions=["检查数据库连接"]
        )
    """
    extra = {
        "alert_level": level,
        "alert_title": title,
    }

    if context:
        extra["context"] = context

    if suggested_actions:
        extra["suggested_actions"] = suggested_actions

    if level == AlertLevel.P0_CRITICAL:
        logger.critical(f"[{level}] {title}: {message}", extra=extra)
    elif level == AlertLevel.P1_URGENT:
        logger.error(f"[{level}] {title}: {message}", extra=extra)
    else:
        logger.warning(f"[{level}] {title}: {message}", extra=extra)
