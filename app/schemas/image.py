"""
Pydantic схемы изображений каталога.

Изображения категорий и товаров имеют одинаковую структуру:
набор URL с хостинга изображений, флаг главного изображения и порядок.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HostedImage(BaseModel):
    """URL изображения, полученные от хостинга после загрузки."""

    image_url: str = Field(..., min_length=1, description="URL оригинала")
    display_url: str = Field(..., min_length=1, description="URL для отображения")
    thumb_url: str = Field(..., min_length=1, description="URL миниатюры")
    delete_url: str = Field(..., min_length=1, description="Ссылка для удаления")


class ImageFields(HostedImage):
    """Общие поля для создания изображения."""

    is_primary: bool = Field(False, description="Главное изображение")
    alt_text: Optional[str] = Field(None, description="Альтернативный текст")
    sort_order: Optional[int] = Field(
        None, ge=0, description="Порядок сортировки (по умолчанию в конец списка)"
    )


class CategoryImageCreate(ImageFields):
    """Схема для создания изображения категории."""

    category_id: int


class ProductImageCreate(ImageFields):
    """Схема для создания изображения товара."""

    product_id: int


class ImageUpdate(BaseModel):
    """Схема для частичного обновления изображения."""

    image_url: Optional[str] = Field(None, min_length=1)
    display_url: Optional[str] = Field(None, min_length=1)
    thumb_url: Optional[str] = Field(None, min_length=1)
    delete_url: Optional[str] = Field(None, min_length=1)
    is_primary: Optional[bool] = None
    alt_text: Optional[str] = None
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator(
        "image_url", "display_url", "thumb_url", "delete_url", "is_primary", "sort_order"
    )
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class ImageOut(HostedImage):
    """Схема для вывода изображения."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    is_primary: bool
    alt_text: Optional[str] = None
    sort_order: int


class CategoryImageOut(ImageOut):
    category_id: int


class ProductImageOut(ImageOut):
    product_id: int


class DeleteImageRequest(BaseModel):
    """Запрос на удаление изображения с хостинга."""

    delete_url: str = Field(..., min_length=1)
