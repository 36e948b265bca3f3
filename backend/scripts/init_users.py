"""
初始化用户数据

用法: python scripts/init_users.py <username> <password> [--admin]
"""
import argparse
import sys
import os

# 添加项目根目录到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError

from app.database import SessionLocal
from app.models.user import User, UserRole
from app.middleware.auth import get_password_hash


def upsert_user(username: str, password: str, is_admin: bool) -> None:
    """创建用户，已存在则更新密码和角色"""
    db = SessionLocal()
    role = UserRole.ADMIN if is_admin else UserRole.USER
    try:
        user = db.query(User).filter(User.username == username).first()
        if user:
            user.password_hash = get_password_hash(password)
            user.role = role
            print(f"更新账户：{username} ({role.value})")
        else:
            db.add(User(username=username, password_hash=get_password_hash(password), role=role))
            print(f"创建账户：{username} ({role.value})")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        print(f"初始化失败：{e}")
        raise SystemExit(1)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="创建或更新用户")
    parser.add_argument("username")
    parser.add_argument("password")
    parser.add_argument("--admin", action="store_true", help="授予管理员角色")
    args = parser.parse_args()
    upsert_user(args.username, args.password, args.admin)
