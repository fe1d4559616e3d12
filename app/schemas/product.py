"""
Pydantic схемы товаров.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.image import ProductImageOut


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, description="Название товара")
    description: str = Field(..., description="Описание товара")
    price: int = Field(..., ge=0, description="Цена в целых единицах валюты")
    category_id: Optional[int] = Field(None, description="ID категории")

    # Флаги витрины
    featured: bool = False
    bestseller: bool = False
    new_arrival: bool = False

    # Характеристики
    accuracy: Optional[str] = None
    power_supply: Optional[str] = None
    display: Optional[str] = None
    material: Optional[str] = None
    warranty: Optional[str] = None
    certification: Optional[str] = None


class ProductCreate(ProductBase):
    """Схема для создания товара."""


class ProductUpdate(BaseModel):
    """Схема для частичного обновления товара."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    featured: Optional[bool] = None
    bestseller: Optional[bool] = None
    new_arrival: Optional[bool] = None
    accuracy: Optional[str] = None
    power_supply: Optional[str] = None
    display: Optional[str] = None
    material: Optional[str] = None
    warranty: Optional[str] = None
    certification: Optional[str] = None

    # category_id и характеристики можно сбросить в null
    @field_validator(
        "name", "description", "price", "featured", "bestseller", "new_arrival"
    )
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class ProductOut(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ProductWithImage(ProductOut):
    """Товар с URL главного изображения (для списков)."""

    image: Optional[str] = None


class ProductDetail(ProductOut):
    """Товар со всеми изображениями в порядке отображения."""

    images: List[ProductImageOut] = []
