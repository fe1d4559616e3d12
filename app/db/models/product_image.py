"""
Модель изображения товара.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class ProductImage(Base):
    """
    Изображение товара, размещенное на внешнем хостинге.

    Attributes:
        id: Уникальный идентификатор изображения
        product_id: ID товара
        image_url: URL оригинала
        display_url: URL для отображения
        thumb_url: URL миниатюры
        delete_url: Ссылка для удаления с хостинга
        is_primary: Флаг главного изображения (не более одного на товар)
        alt_text: Альтернативный текст для SEO
        sort_order: Порядок сортировки
        product: Связь с товаром
    """

    __tablename__ = "product_images"

    __table_args__ = (
        Index("ix_product_images_product_id_sort", "product_id", "sort_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE")
    )
    image_url: Mapped[str] = mapped_column(Text)
    display_url: Mapped[str] = mapped_column(Text)
    thumb_url: Mapped[str] = mapped_column(Text)
    delete_url: Mapped[str] = mapped_column(Text)
    is_primary: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=text("false")
    )

    # SEO и доступность
    alt_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(
        Integer, default=0, server_default=text("0")
    )

    # Связь с товаром
    product: Mapped["Product"] = relationship(back_populates="images")

    def __repr__(self) -> str:
        return f"<ProductImage(id={self.id}, product_id={self.product_id})>"
