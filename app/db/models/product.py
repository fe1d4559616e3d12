"""
Модель товара.
"""

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Product(Base):
    """
    Модель товара (весы).

    Attributes:
        id: Уникальный идентификатор товара
        name: Название товара
        description: Описание товара
        price: Цена в целых единицах валюты
        category_id: ID категории (может отсутствовать)
        featured: Рекомендуемый товар
        bestseller: Хит продаж
        new_arrival: Новинка
        accuracy: Точность взвешивания
        power_supply: Питание
        display: Тип дисплея
        material: Материал
        warranty: Гарантия
        certification: Сертификация
        category: Связь с категорией
        images: Связь с изображениями товара
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    description: Mapped[str] = mapped_column(Text)
    price: Mapped[int] = mapped_column(Integer)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    # Флаги витрины
    featured: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), index=True
    )
    bestseller: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), index=True
    )
    new_arrival: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false"), index=True
    )

    # Характеристики
    accuracy: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    power_supply: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    display: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    material: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    warranty: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    certification: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Связи с другими моделями
    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    images: Mapped[List["ProductImage"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"
