"""
数据库连接与会话
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

Base = declarative_base()

# 秒，等待其他连接释放写锁
SQLITE_BUSY_TIMEOUT = 30


def _install_sqlite_hooks(engine) -> None:
    """SQLite 专用：开启外键（级联删除依赖它），并让 SAVEPOINT 正常工作

    pysqlite 默认自己管理事务，会吞掉 BEGIN，导致 begin_nested() 不可靠，
    这里改为由 SQLAlchemy 显式发出 BEGIN IMMEDIATE。
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # IMMEDIATE：事务开始即拿写锁，并发写入在 busy timeout 内排队，
    # 避免两个事务都持有共享锁后同时升级写锁导致 "database is locked"
    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(url: str, **kwargs):
    """按 URL 创建 engine，SQLite 自动挂上必要的连接钩子"""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT})
        engine = create_engine(url, **kwargs)
        _install_sqlite_hooks(engine)
        return engine
    return create_engine(url, pool_pre_ping=True, pool_size=20, max_overflow=10, **kwargs)


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """创建所有表（开发/测试环境；生产环境走 alembic）"""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
