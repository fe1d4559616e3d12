"""
Исключения предметной области и их преобразование в HTTP ответы.

Сервисы бросают исключения из этого модуля, а обработчики,
зарегистрированные в приложении, превращают их в ответы вида
{"detail": "..."}. Ситуация "не найдено" исключением не является:
сервисы возвращают None/False, а endpoint'ы отвечают 404.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Базовое исключение каталога."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ConflictError(CatalogError):
    """Нарушение уникальности или связанные записи мешают операции."""

    status_code = status.HTTP_409_CONFLICT


class InvalidReferenceError(CatalogError):
    """Ссылка на несуществующую категорию или товар."""


class ImageValidationError(CatalogError):
    """Загруженный файл не является допустимым изображением."""


class ImageHostError(CatalogError):
    """Хостинг изображений недоступен или вернул ошибку."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ImageHostNotConfigured(ImageHostError):
    """Ключ API хостинга изображений не задан."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class EmailDeliveryError(Exception):
    """Не удалось отправить письмо. До клиента не доходит."""


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Первый элемент loc - источник (body/query/path), он не интересен клиенту
        loc = [str(item) for item in error.get("loc", ())[1:]]
        field = ".".join(loc) or "request"
        parts.append(f"{field}: {error.get('msg')}")
    return "; ".join(parts)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "detail": _format_validation_errors(exc),
            "errors": jsonable_errors(exc),
        },
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Список ошибок без объектов исключений внутри ctx."""
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "loc": list(error.get("loc", ())),
                "msg": error.get("msg"),
                "type": error.get("type"),
            }
        )
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Подключить обработчики исключений к приложению."""
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
