"""
Pydantic схемы категорий.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.db.models.category import ROOT_CATEGORY
from app.schemas.image import CategoryImageOut

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, description="Название категории")
    slug: str = Field(
        ..., min_length=1, max_length=255, pattern=SLUG_PATTERN, description="URL-slug"
    )
    description: str = Field(..., description="Описание категории")
    href: str = Field(..., min_length=1, description="Путь страницы категории")
    title: str = Field(..., min_length=1, description="Заголовок страницы")


class CategoryCreate(CategoryBase):
    """Схема для создания категории."""

    parent_category: str = Field(
        ROOT_CATEGORY, min_length=1, description="Метка родительской группы"
    )


class CategoryUpdate(BaseModel):
    """Схема для частичного обновления категории."""

    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    href: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    parent_category: Optional[str] = Field(None, min_length=1)

    @field_validator("name", "slug", "description", "href", "title", "parent_category")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class CategoryOut(CategoryBase):
    """Схема для вывода категории."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    parent_category: str


class CategoryWithImage(CategoryOut):
    """Категория с URL главного изображения (для витрины)."""

    image: Optional[str] = None


class CategoryDetail(CategoryOut):
    """Категория со всеми изображениями."""

    images: List[CategoryImageOut] = []
