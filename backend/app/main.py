import logging
import re

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from app.config import settings
from app.logging_config import AlertLevel, log_alert
from app.api import admin_announcements, announcements, auth
from app.database import init_db
from app.exceptions import AnnouncementServiceError, StorageError
from app.rate_limit import limiter

logger = logging.getLogger(__name__)

app = FastAPI(title="Announcement Service API")

# 速率限制配置
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

ALLOWED_ORIGINS = list(settings.CORS_ORIGINS)
ALLOWED_ORIGIN_REGEX = settings.CORS_ORIGIN_REGEX


def is_origin_allowed(origin: str) -> bool:
    """检查 origin 是否被允许（白名单或正则）"""
    if not origin:
        return False
    if origin in ALLOWED_ORIGINS:
        return True
    return bool(ALLOWED_ORIGIN_REGEX and re.match(ALLOWED_ORIGIN_REGEX, origin))


# CORS配置 - 必须在所有路由之前添加
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_origin_regex=ALLOWED_ORIGIN_REGEX or None,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "HEAD"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With", "Accept", "Origin"],
    expose_headers=["X-Request-Id"],
    max_age=3600,
)


# 安全头部中间件
@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """添加安全响应头"""
    response = await call_next(request)
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


def get_cors_headers(origin: str = None) -> dict:
    """错误响应也带上 CORS 头，按请求来源动态返回 Origin"""
    headers = {
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS, PATCH, HEAD",
        "Access-Control-Allow-Headers": "Authorization, Content-Type, X-Requested-With, Accept, Origin",
        "Access-Control-Allow-Credentials": "true",
    }
    if origin and is_origin_allowed(origin):
        headers["Access-Control-Allow-Origin"] = origin
    return headers


@app.exception_handler(AnnouncementServiceError)
async def announcement_exception_handler(request: Request, exc: AnnouncementServiceError):
    """公告服务异常 -> {detail, code}"""
    if isinstance(exc, StorageError):
        log_alert(
            logger,
            AlertLevel.P1_URGENT,
            "公告存储不可用",
            exc.detail,
            context={"method": request.method, "path": request.url.path},
            suggested_actions=["检查数据库连接", "查看 error.log 中的 SQLAlchemy 异常"],
        )
    else:
        logger.info(f"[{exc.code}] {request.method} {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=get_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTP异常处理器，确保包含CORS头"""
    headers = get_cors_headers(request.headers.get("origin"))
    if exc.headers:
        headers.update(exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


@app.exception_handler(HTTPException)
async def fastapi_http_exception_handler(request: Request, exc: HTTPException):
    """FastAPI HTTPException处理器，确保包含CORS头"""
    return await http_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """请求验证异常处理器，确保包含CORS头"""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
        headers=get_cors_headers(request.headers.get("origin")),
    )


# API routes
app.include_router(auth.router)
app.include_router(announcements.router)
app.include_router(admin_announcements.router)


@app.get("/health")
async def health():
    """健康检查端点"""
    return {"status": "ok"}


@app.get("/")
def root():
    return {"message": "Announcement service is running", "docs": "/docs"}


@app.on_event("startup")
async def startup_event():
    """应用启动时执行"""
    if settings.AUTO_CREATE_TABLES:
        init_db()
        logger.info("数据库表检查完成")
