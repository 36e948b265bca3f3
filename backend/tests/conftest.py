"""
测试公共夹具

环境变量必须在导入 app.* 之前设置（settings 在导入时实例化）。
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, create_db_engine, get_db
from app.middleware.auth import create_access_token
from app.models.user import User, UserRole
from app.schemas.announcement import AnnouncementCreate
from app.services.announcement_admin_service import AnnouncementAdminService


@pytest.fixture
def engine():
    """内存 SQLite，StaticPool 保证所有会话看到同一个库"""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def make_user(session, username: str, role: UserRole = UserRole.USER) -> User:
    user = User(username=username, password_hash="not-used", role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_announcement(session, title: str = "公告", **kwargs):
    payload = AnnouncementCreate(title=title, content=kwargs.pop("content", f"{title} 内容"), **kwargs)
    return AnnouncementAdminService(session).create(payload)


@pytest.fixture
def user(db):
    return make_user(db, "alice")


@pytest.fixture
def other_user(db):
    return make_user(db, "bob")


@pytest.fixture
def client(session_factory):
    """TestClient，get_db 指向测试库；不进入上下文，避免触发 startup 建表"""
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def accounts(session_factory):
    """管理员 + 两个普通用户，返回各自的 Authorization 头"""
    session = session_factory()
    try:
        admin = make_user(session, "admin", UserRole.ADMIN)
        alice = make_user(session, "alice")
        bob = make_user(session, "bob")
        ids = {"admin": admin.id, "alice": alice.id, "bob": bob.id}
    finally:
        session.close()

    def headers(username):
        return {"Authorization": f"Bearer {create_access_token({'sub': username})}"}

    return {
        "ids": ids,
        "admin": headers("admin"),
        "alice": headers("alice"),
        "bob": headers("bob"),
    }
