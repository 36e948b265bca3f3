"""
初始化数据库（开发环境；生产环境请用 alembic upgrade head）
"""
import sys
import os

# 添加项目根目录到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import init_db


if __name__ == "__main__":
    init_db()
    print("数据库表创建完成！")
