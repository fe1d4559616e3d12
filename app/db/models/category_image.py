"""
Модель изображения категории.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class CategoryImage(Base):
    """
    Изображение категории, размещенное на внешнем хостинге.

    Attributes:
        id: Уникальный идентификатор изображения
        category_id: ID категории-владельца
        image_url: URL оригинала
        display_url: URL для отображения
        thumb_url: URL миниатюры
        delete_url: Ссылка для удаления с хостинга
        is_primary: Флаг главного изображения (не более одного на категорию)
        alt_text: Альтернативный текст
        sort_order: Порядок отображения
    """

    __tablename__ = "category_images"

    __table_args__ = (
        Index("ix_category_images_category_id_sort", "category_id", "sort_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE")
    )
    image_url: Mapped[str] = mapped_column(Text)
    display_url: Mapped[str] = mapped_column(Text)
    thumb_url: Mapped[str] = mapped_column(Text)
    delete_url: Mapped[str] = mapped_column(Text)
    is_primary: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false")
    )
    alt_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        Integer, default=0, server_default=text("0")
    )

    # Связь с категорией
    category: Mapped["Category"] = relationship(back_populates="images")

    def __repr__(self) -> str:
        return f"<CategoryImage(id={self.id}, category_id={self.category_id})>"
