"""
Модели базы данных.

Импортирует все модели для корректной работы SQLAlchemy.
"""

from .base import Base
from .category import Category
from .category_image import CategoryImage
from .contact_message import ContactMessage
from .product import Product
from .product_image import ProductImage

__all__ = [
    "Base",
    "Category",
    "CategoryImage",
    "Product",
    "ProductImage",
    "ContactMessage",
]
