"""
Модель категории товаров.
"""

from typing import List

from sqlalchemy import String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

# Метка корневой категории для parent_category
ROOT_CATEGORY = "root"


class Category(Base):
    """
    Модель категории товаров.

    Attributes:
        id: Уникальный идентификатор категории
        name: Отображаемое название
        slug: URL-friendly название категории (уникально)
        description: Описание категории
        href: Канонический путь страницы категории
        title: Заголовок страницы
        parent_category: Текстовая метка родительской группы (не внешний ключ)
        images: Изображения категории (удаляются вместе с категорией)
        products: Товары категории
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[str] = mapped_column(Text)
    href: Mapped[str] = mapped_column(Text)
    title: Mapped[str] = mapped_column(Text)
    parent_category: Mapped[str] = mapped_column(
        Text, default=ROOT_CATEGORY, server_default=text(f"'{ROOT_CATEGORY}'")
    )

    # Изображения удаляются каскадно на уровне БД
    images: Mapped[List["CategoryImage"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Товары не удаляются вместе с категорией (ON DELETE RESTRICT)
    products: Mapped[List["Product"]] = relationship(
        back_populates="category",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}')>"
