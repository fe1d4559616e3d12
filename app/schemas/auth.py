"""
Pydantic схемы аутентификации администратора.
"""

from pydantic import BaseModel, Field

from app.core.auth import AdminIdentity


class LoginRequest(BaseModel):
    """Схема для входа в систему."""

    username: str = Field(..., min_length=1, description="Логин")
    password: str = Field(..., min_length=1, description="Пароль")


class LoginResponse(BaseModel):
    """Схема ответа при входе в систему."""

    message: str = "Login successful"
    token: str
    expires_in: int
    user: AdminIdentity


class VerifyResponse(BaseModel):
    valid: bool = True
    user: AdminIdentity
