"""
Модуль аутентификации администратора.

В системе один администратор с фиксированным логином. Пароль хранится
только в виде bcrypt хеша, вычисленного один раз при старте (или заданного
в настройках). После входа выдается JWT токен с ограниченным сроком жизни,
который предъявляется в заголовке Authorization: Bearer <token>.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from pydantic import BaseModel

from app.core.config import settings

logger = logging.getLogger(__name__)

# Настройка хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer схема (ошибку об отсутствии токена формируем сами)
security = HTTPBearer(auto_error=False)


class AdminIdentity(BaseModel):
    """Данные аутентифицированного администратора."""

    username: str


class AuthService:
    """Сервис для работы с аутентификацией."""

    def __init__(
        self,
        username: str,
        password_hash: str,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 24 * 60,
    ):
        self.username = username
        self.password_hash = password_hash
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Проверка пароля."""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Хеширование пароля."""
        return pwd_context.hash(password)

    def authenticate(self, username: str, password: str) -> bool:
        """Проверка пары логин/пароль для фиксированного администратора."""
        if username != self.username:
            return False
        return self.verify_password(password, self.password_hash)

    def create_access_token(
        self, username: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """Создание JWT токена."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expire_minutes)
        expire = datetime.now(timezone.utc) + expires_delta

        to_encode = {"username": username, "exp": expire}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Optional[dict]:
        """Проверка JWT токена (подпись и срок действия)."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            return None


@lru_cache
def get_auth_service() -> AuthService:
    """
    Dependency с настроенным сервисом аутентификации.

    Хеш пароля вычисляется один раз, если в настройках не задан готовый.
    """
    password_hash = settings.ADMIN_PASSWORD_HASH
    if not password_hash:
        password_hash = AuthService.get_password_hash(settings.ADMIN_PASSWORD)
    return AuthService(
        username=settings.ADMIN_USERNAME,
        password_hash=password_hash,
        secret_key=settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> AdminIdentity:
    """Проверка прав администратора по Bearer токену."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = auth_service.verify_token(credentials.credentials)
    username = payload.get("username") if payload else None
    if username != auth_service.username:
        logger.info("Rejected admin token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AdminIdentity(username=username)
