"""
Базовый класс для всех моделей SQLAlchemy.

Задает единые имена ограничений (ix_/uq_/fk_/pk_), чтобы индексы
и внешние ключи каталога одинаково назывались в PostgreSQL и SQLite.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Базовый класс для всех моделей каталога."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
