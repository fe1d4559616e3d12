"""
Главный модуль FastAPI приложения каталога весов.

Содержит конфигурацию приложения, middleware и роутеры.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.routers import api_router
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.database import SessionLocal, engine
from app.db.models import Base
from app.services.seed import seed_sample_catalog

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Создание экземпляра FastAPI приложения
app = FastAPI(
    title="Scales Catalog API",
    description="API каталога весов: категории, товары, изображения и контактная форма",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Настройка CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/healthz")
def healthz():
    """
    Health check endpoint для мониторинга состояния приложения.

    Returns:
        dict: Статус приложения
    """
    return {"status": "ok", "service": "Scales Catalog API", "version": "1.0.0"}


# Подключение API роутеров
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_event():
    """
    Событие запуска приложения.

    По настройкам создает таблицы и заполняет пустой каталог демо-данными.
    """
    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")

    if settings.SEED_SAMPLE_DATA:
        with SessionLocal() as db:
            seed_sample_catalog(db)
