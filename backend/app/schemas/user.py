"""
用户相关的Pydantic模型
"""
from datetime import datetime

from pydantic import BaseModel

from app.models.user import UserRole


class UserResponse(BaseModel):
    id: int
    username: str
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse
