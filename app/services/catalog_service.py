"""
Сервис каталога: категории, товары и их изображения.

Инварианты, которые обеспечивает сервис:
- slug категории уникален;
- у категории и у товара не более одного главного изображения:
  перед установкой нового главного флаг снимается с остальных
  в той же транзакции;
- изображения упорядочены по (sort_order, id), новый sort_order
  по умолчанию равен max + 1 (или 0 для первого изображения);
- категорию, на которую ссылаются товары, удалить нельзя;
- изображения удаляются вместе с владельцем (ON DELETE CASCADE).

"Не найдено" - обычный результат (None/False), а не исключение.
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Sequence, Type, Union

from fastapi import Depends
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, InvalidReferenceError
from app.db.database import get_db
from app.db.models import Category, CategoryImage, Product, ProductImage
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.schemas.image import (
    CategoryImageCreate,
    ImageFields,
    ImageUpdate,
    ProductImageCreate,
)
from app.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

ImageModel = Union[Type[CategoryImage], Type[ProductImage]]
AnyImage = Union[CategoryImage, ProductImage]


def pick_primary(images: Sequence[AnyImage]) -> Optional[AnyImage]:
    """Главное изображение, иначе первое по порядку, иначе None."""
    for image in images:
        if image.is_primary:
            return image
    return images[0] if images else None


class CatalogService:
    """Операции каталога поверх сессии SQLAlchemy одного запроса."""

    def __init__(self, db: Session):
        self.db = db

    # ==================== ТРАНЗАКЦИИ ====================

    @contextmanager
    def _write(self, conflict_detail: str = "Conflicting data"):
        """Выполнить запись в одной транзакции с откатом при ошибке."""
        try:
            yield
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(conflict_detail) from exc
        except Exception:
            self.db.rollback()
            raise

    # ==================== КАТЕГОРИИ ====================

    def list_categories(self) -> List[Category]:
        return list(self.db.scalars(select(Category).order_by(Category.id)))

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        return self.db.scalar(select(Category).where(Category.slug == slug))

    def get_category_by_id(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def _ensure_slug_free(self, slug: str, exclude_id: Optional[int] = None) -> None:
        stmt = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        if self.db.scalar(stmt) is not None:
            raise ConflictError(f"Category with slug '{slug}' already exists")

    def create_category(self, data: CategoryCreate) -> Category:
        """Создать категорию. ConflictError, если slug занят."""
        self._ensure_slug_free(data.slug)
        category = Category(**data.model_dump())
        with self._write(f"Category with slug '{data.slug}' already exists"):
            self.db.add(category)
        logger.info("Category %s created (slug=%s)", category.id, category.slug)
        return category

    def create_category_with_images(
        self, data: CategoryCreate, images: Sequence[ImageFields]
    ) -> Category:
        """Создать категорию и ее изображения одной транзакцией."""
        self._ensure_slug_free(data.slug)
        category = Category(**data.model_dump())
        with self._write(f"Category with slug '{data.slug}' already exists"):
            self.db.add(category)
            self.db.flush()
            self._add_image_batch(CategoryImage, "category_id", category.id, images)
        logger.info(
            "Category %s created with %d images", category.id, len(images)
        )
        return category

    def update_category(
        self, category_id: int, data: CategoryUpdate
    ) -> Optional[Category]:
        """Частичное обновление. Последняя запись побеждает."""
        category = self.get_category_by_id(category_id)
        if category is None:
            return None

        fields = data.model_dump(exclude_unset=True)
        if "slug" in fields:
            self._ensure_slug_free(fields["slug"], exclude_id=category_id)

        with self._write(f"Category with slug '{fields.get('slug')}' already exists"):
            for field, value in fields.items():
                setattr(category, field, value)
        logger.info("Category %s updated: %s", category_id, sorted(fields))
        return category

    def delete_category(self, category_id: int) -> bool:
        """
        Удалить категорию вместе с изображениями.

        Raises:
            ConflictError: Если на категорию ссылаются товары
        """
        category = self.get_category_by_id(category_id)
        if category is None:
            return False

        product_count = self.db.scalar(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        )
        if product_count:
            raise ConflictError(
                f"Category is used by {product_count} product(s); "
                "reassign or delete them first"
            )

        with self._write("Category is still referenced"):
            self.db.delete(category)
        logger.info("Category %s deleted", category_id)
        return True

    # ==================== ИЗОБРАЖЕНИЯ (общее) ====================

    def _list_images(
        self, model: ImageModel, parent_field: str, parent_id: int
    ) -> List[AnyImage]:
        parent_column = getattr(model, parent_field)
        stmt = (
            select(model)
            .where(parent_column == parent_id)
            .order_by(model.sort_order, model.id)
        )
        return list(self.db.scalars(stmt))

    def _next_sort_order(
        self, model: ImageModel, parent_field: str, parent_id: int
    ) -> int:
        current_max = self.db.scalar(
            select(func.max(model.sort_order)).where(
                getattr(model, parent_field) == parent_id
            )
        )
        return 0 if current_max is None else current_max + 1

    def _clear_primary(
        self,
        model: ImageModel,
        parent_field: str,
        parent_id: int,
        exclude_id: Optional[int] = None,
    ) -> None:
        stmt = (
            update(model)
            .where(getattr(model, parent_field) == parent_id)
            .where(model.is_primary.is_(True))
            .values(is_primary=False)
        )
        if exclude_id is not None:
            stmt = stmt.where(model.id != exclude_id)
        self.db.execute(stmt)

    def _create_image(
        self, model: ImageModel, parent_field: str, parent_id: int, data: ImageFields
    ) -> AnyImage:
        fields = data.model_dump()
        with self._write("Image could not be stored"):
            if data.is_primary:
                self._clear_primary(model, parent_field, parent_id)
            if fields.get("sort_order") is None:
                fields["sort_order"] = self._next_sort_order(
                    model, parent_field, parent_id
                )
            image = model(**fields)
            self.db.add(image)
        logger.info(
            "%s %s created for %s=%s (primary=%s, sort_order=%s)",
            model.__name__, image.id, parent_field, parent_id,
            image.is_primary, image.sort_order,
        )
        return image

    def _add_image_batch(
        self,
        model: ImageModel,
        parent_field: str,
        parent_id: int,
        images: Iterable[ImageFields],
    ) -> None:
        """Добавить пакет изображений новому владельцу (внутри транзакции)."""
        has_primary = False
        for index, data in enumerate(images):
            fields = data.model_dump()
            fields[parent_field] = parent_id
            if fields.get("sort_order") is None:
                fields["sort_order"] = index
            # Первое помеченное изображение остается главным
            fields["is_primary"] = bool(fields["is_primary"]) and not has_primary
            has_primary = has_primary or fields["is_primary"]
            self.db.add(model(**fields))

    def _update_image(
        self, model: ImageModel, parent_field: str, image_id: int, data: ImageUpdate
    ) -> Optional[AnyImage]:
        image = self.db.get(model, image_id)
        if image is None:
            return None

        fields = data.model_dump(exclude_unset=True)
        with self._write("Image could not be updated"):
            if fields.get("is_primary"):
                self._clear_primary(
                    model, parent_field, getattr(image, parent_field), exclude_id=image_id
                )
            for field, value in fields.items():
                setattr(image, field, value)
        logger.info("%s %s updated: %s", model.__name__, image_id, sorted(fields))
        return image

    def _delete_image(self, model: ImageModel, image_id: int) -> bool:
        image = self.db.get(model, image_id)
        if image is None:
            return False
        with self._write():
            self.db.delete(image)
        logger.info("%s %s deleted", model.__name__, image_id)
        return True

    def _primary_images_for(
        self, model: ImageModel, parent_field: str, parent_ids: Sequence[int]
    ) -> Dict[int, AnyImage]:
        """Главное (или первое) изображение для каждого владельца одним запросом."""
        if not parent_ids:
            return {}
        parent_column = getattr(model, parent_field)
        stmt = (
            select(model)
            .where(parent_column.in_(parent_ids))
            .order_by(parent_column, model.sort_order, model.id)
        )
        grouped: Dict[int, List[AnyImage]] = {}
        for image in self.db.scalars(stmt):
            grouped.setdefault(getattr(image, parent_field), []).append(image)
        return {parent_id: pick_primary(images) for parent_id, images in grouped.items()}

    # ==================== ИЗОБРАЖЕНИЯ КАТЕГОРИЙ ====================

    def list_category_images(self, category_id: int) -> List[CategoryImage]:
        return self._list_images(CategoryImage, "category_id", category_id)

    def get_category_image(self, image_id: int) -> Optional[CategoryImage]:
        return self.db.get(CategoryImage, image_id)

    def get_primary_category_image(self, category_id: int) -> Optional[CategoryImage]:
        return pick_primary(self.list_category_images(category_id))

    def primary_category_images(
        self, category_ids: Sequence[int]
    ) -> Dict[int, CategoryImage]:
        return self._primary_images_for(CategoryImage, "category_id", category_ids)

    def create_category_image(self, data: CategoryImageCreate) -> CategoryImage:
        """
        Создать изображение категории.

        Raises:
            InvalidReferenceError: Если категория не существует
        """
        if self.get_category_by_id(data.category_id) is None:
            raise InvalidReferenceError(f"Category {data.category_id} does not exist")
        return self._create_image(CategoryImage, "category_id", data.category_id, data)

    def update_category_image(
        self, image_id: int, data: ImageUpdate
    ) -> Optional[CategoryImage]:
        return self._update_image(CategoryImage, "category_id", image_id, data)

    def delete_category_image(self, image_id: int) -> bool:
        return self._delete_image(CategoryImage, image_id)

    # ==================== ТОВАРЫ ====================

    def ensure_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and self.get_category_by_id(category_id) is None:
            raise InvalidReferenceError(f"Category {category_id} does not exist")

    def list_products(self) -> List[Product]:
        return list(self.db.scalars(select(Product).order_by(Product.id)))

    def get_product_by_id(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list_products_by_category(self, category_id: int) -> List[Product]:
        stmt = (
            select(Product)
            .where(Product.category_id == category_id)
            .order_by(Product.id)
        )
        return list(self.db.scalars(stmt))

    def list_products_by_category_slug(self, slug: str) -> List[Product]:
        """Товары категории по slug. Неизвестный slug - пустой список."""
        category = self.get_category_by_slug(slug)
        if category is None:
            return []
        return self.list_products_by_category(category.id)

    def _list_flagged(self, flag) -> List[Product]:
        return list(
            self.db.scalars(select(Product).where(flag.is_(True)).order_by(Product.id))
        )

    def list_featured(self) -> List[Product]:
        return self._list_flagged(Product.featured)

    def list_bestsellers(self) -> List[Product]:
        return self._list_flagged(Product.bestseller)

    def list_new_arrivals(self) -> List[Product]:
        return self._list_flagged(Product.new_arrival)

    def create_product(self, data: ProductCreate) -> Product:
        self.ensure_category(data.category_id)
        product = Product(**data.model_dump())
        with self._write("Product could not be stored"):
            self.db.add(product)
        logger.info("Product %s created (category=%s)", product.id, product.category_id)
        return product

    def create_product_with_images(
        self, data: ProductCreate, images: Sequence[ImageFields]
    ) -> Product:
        """Создать товар и его изображения одной транзакцией."""
        self.ensure_category(data.category_id)
        product = Product(**data.model_dump())
        with self._write("Product could not be stored"):
            self.db.add(product)
            self.db.flush()
            self._add_image_batch(ProductImage, "product_id", product.id, images)
        logger.info("Product %s created with %d images", product.id, len(images))
        return product

    def update_product(self, product_id: int, data: ProductUpdate) -> Optional[Product]:
        product = self.get_product_by_id(product_id)
        if product is None:
            return None

        fields = data.model_dump(exclude_unset=True)
        if "category_id" in fields:
            self.ensure_category(fields["category_id"])

        with self._write("Product could not be updated"):
            for field, value in fields.items():
                setattr(product, field, value)
        logger.info("Product %s updated: %s", product_id, sorted(fields))
        return product

    def delete_product(self, product_id: int) -> bool:
        """Удалить товар вместе с изображениями."""
        product = self.get_product_by_id(product_id)
        if product is None:
            return False
        with self._write():
            self.db.delete(product)
        logger.info("Product %s deleted", product_id)
        return True

    # ==================== ИЗОБРАЖЕНИЯ ТОВАРОВ ====================

    def list_product_images(self, product_id: int) -> List[ProductImage]:
        return self._list_images(ProductImage, "product_id", product_id)

    def get_product_image(self, image_id: int) -> Optional[ProductImage]:
        return self.db.get(ProductImage, image_id)

    def get_primary_product_image(self, product_id: int) -> Optional[ProductImage]:
        return pick_primary(self.list_product_images(product_id))

    def primary_product_images(
        self, product_ids: Sequence[int]
    ) -> Dict[int, ProductImage]:
        return self._primary_images_for(ProductImage, "product_id", product_ids)

    def create_product_image(self, data: ProductImageCreate) -> ProductImage:
        """
        Создать изображение товара.

        Если is_primary=True, флаг сначала снимается со всех изображений
        этого товара. Без sort_order изображение встает в конец списка.

        Raises:
            InvalidReferenceError: Если товар не существует
        """
        if self.get_product_by_id(data.product_id) is None:
            raise InvalidReferenceError(f"Product {data.product_id} does not exist")
        return self._create_image(ProductImage, "product_id", data.product_id, data)

    def update_product_image(
        self, image_id: int, data: ImageUpdate
    ) -> Optional[ProductImage]:
        return self._update_image(ProductImage, "product_id", image_id, data)

    def delete_product_image(self, image_id: int) -> bool:
        return self._delete_image(ProductImage, image_id)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency с сервисом каталога для текущего запроса."""
    return CatalogService(db)
