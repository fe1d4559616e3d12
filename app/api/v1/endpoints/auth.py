"""
API эндпоинты аутентификации администратора.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.auth import AdminIdentity, AuthService, get_auth_service, require_admin
from app.schemas.auth import LoginRequest, LoginResponse, VerifyResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Вход в административную панель.

    Args:
        login_data: Данные для входа (username, password)

    Returns:
        JWT токен, срок его действия в секундах и имя администратора

    Raises:
        HTTPException: При неверных учетных данных
    """
    if not auth_service.authenticate(login_data.username, login_data.password):
        logger.warning("Failed admin login for username %r", login_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = auth_service.create_access_token(login_data.username)
    logger.info("Admin %s logged in", login_data.username)
    return LoginResponse(
        token=token,
        expires_in=auth_service.expire_minutes * 60,
        user=AdminIdentity(username=login_data.username),
    )


@router.get("/verify", response_model=VerifyResponse)
def verify(admin: AdminIdentity = Depends(require_admin)):
    """Проверить, что токен действителен."""
    return VerifyResponse(user=admin)
