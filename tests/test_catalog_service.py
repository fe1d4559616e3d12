"""Test catalog service invariants against an in-memory database."""

import pytest
from sqlalchemy import func, select

from app.core.exceptions import ConflictError, InvalidReferenceError
from app.db.models import Category, CategoryImage, ProductImage
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.schemas.image import (
    CategoryImageCreate,
    ImageFields,
    ImageUpdate,
    ProductImageCreate,
)
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.catalog_service import pick_primary
from app.services.seed import SAMPLE_CATEGORIES, SAMPLE_PRODUCTS, seed_sample_catalog

from conftest import category_payload, hosted_image, product_payload


def product_image(product_id, n=1, **fields):
    return ProductImageCreate(product_id=product_id, **hosted_image(n), **fields)


def category_image(category_id, n=1, **fields):
    return CategoryImageCreate(category_id=category_id, **hosted_image(n), **fields)


class TestCategories:
    """Category CRUD and slug rules."""

    def test_create_assigns_id_and_root_parent(self, make_category):
        category = make_category()
        assert category.id is not None
        assert category.parent_category == "root"

    def test_duplicate_slug_conflicts_and_keeps_one_row(self, catalog, db_session, make_category):
        make_category("kitchen-scale")
        with pytest.raises(ConflictError):
            make_category("kitchen-scale", name="Another")

        count = db_session.scalar(
            select(func.count(Category.id)).where(Category.slug == "kitchen-scale")
        )
        assert count == 1

    def test_slug_lookup_is_case_sensitive(self, catalog, make_category):
        make_category("kitchen")
        assert catalog.get_category_by_slug("kitchen") is not None
        assert catalog.get_category_by_slug("Kitchen") is None

    def test_update_merges_only_given_fields(self, catalog, make_category):
        category = make_category()
        updated = catalog.update_category(category.id, CategoryUpdate(title="New title"))
        assert updated.title == "New title"
        assert updated.name == "Kitchen Scales"

    def test_update_to_taken_slug_conflicts(self, catalog, make_category):
        make_category("kitchen")
        other = make_category("dairy")
        with pytest.raises(ConflictError):
            catalog.update_category(other.id, CategoryUpdate(slug="kitchen"))

    def test_update_and_delete_missing_return_not_found(self, catalog):
        assert catalog.update_category(999, CategoryUpdate(name="x")) is None
        assert catalog.delete_category(999) is False

    def test_delete_cascades_images(self, catalog, db_session, make_category):
        category = make_category()
        for n in range(3):
            catalog.create_category_image(category_image(category.id, n))

        assert catalog.delete_category(category.id) is True
        db_session.expire_all()
        remaining = db_session.scalar(
            select(func.count(CategoryImage.id)).where(
                CategoryImage.category_id == category.id
            )
        )
        assert remaining == 0

    def test_delete_with_products_is_blocked(self, catalog, make_category, make_product):
        category = make_category()
        make_product(category_id=category.id)

        with pytest.raises(ConflictError):
            catalog.delete_category(category.id)
        assert catalog.get_category_by_id(category.id) is not None

    def test_create_with_images_is_one_unit(self, catalog):
        images = [ImageFields(**hosted_image(n), is_primary=True) for n in range(3)]
        category = catalog.create_category_with_images(
            CategoryCreate(**category_payload()), images
        )

        stored = catalog.list_category_images(category.id)
        assert [img.sort_order for img in stored] == [0, 1, 2]
        assert [img.is_primary for img in stored] == [True, False, False]


class TestProducts:
    """Product CRUD and list filters."""

    def test_unknown_category_reference_rejected(self, catalog):
        with pytest.raises(InvalidReferenceError):
            catalog.create_product(ProductCreate(**product_payload(category_id=42)))

    def test_products_may_be_uncategorized(self, make_product):
        assert make_product().category_id is None

    def test_list_by_unknown_slug_is_empty(self, catalog, make_product):
        make_product()
        assert catalog.list_products_by_category_slug("unknown-slug") == []

    def test_list_by_slug(self, catalog, make_category, make_product):
        kitchen = make_category("kitchen")
        dairy = make_category("dairy")
        scale = make_product(category_id=kitchen.id)
        make_product(name="Milk Scale", category_id=dairy.id)

        assert [p.id for p in catalog.list_products_by_category_slug("kitchen")] == [scale.id]

    def test_flag_filters(self, catalog, make_product):
        featured = make_product(name="A", featured=True)
        bestseller = make_product(name="B", bestseller=True)
        new = make_product(name="C", new_arrival=True)
        make_product(name="D")

        assert [p.id for p in catalog.list_featured()] == [featured.id]
        assert [p.id for p in catalog.list_bestsellers()] == [bestseller.id]
        assert [p.id for p in catalog.list_new_arrivals()] == [new.id]

    def test_update_can_uncategorize(self, catalog, make_category, make_product):
        product = make_product(category_id=make_category().id)
        updated = catalog.update_product(product.id, ProductUpdate(category_id=None))
        assert updated.category_id is None

    def test_delete_cascades_images(self, catalog, db_session, make_product):
        product = make_product()
        for n in range(2):
            catalog.create_product_image(product_image(product.id, n))

        assert catalog.delete_product(product.id) is True
        db_session.expire_all()
        remaining = db_session.scalar(
            select(func.count(ProductImage.id)).where(ProductImage.product_id == product.id)
        )
        assert remaining == 0


class TestImages:
    """Ordering and single-primary rules shared by both image kinds."""

    def test_new_primary_clears_previous(self, catalog, make_product):
        product = make_product()
        first = catalog.create_product_image(product_image(product.id, 1, is_primary=True))
        second = catalog.create_product_image(product_image(product.id, 2, is_primary=True))

        primaries = [img.id for img in catalog.list_product_images(product.id) if img.is_primary]
        assert primaries == [second.id]
        assert first.id != second.id

    def test_category_images_enforce_single_primary_too(self, catalog, make_category):
        category = make_category()
        catalog.create_category_image(category_image(category.id, 1, is_primary=True))
        second = catalog.create_category_image(category_image(category.id, 2, is_primary=True))

        primaries = [img.id for img in catalog.list_category_images(category.id) if img.is_primary]
        assert primaries == [second.id]

    def test_update_to_primary_clears_siblings(self, catalog, make_product):
        product = make_product()
        first = catalog.create_product_image(product_image(product.id, 1, is_primary=True))
        second = catalog.create_product_image(product_image(product.id, 2))

        catalog.update_product_image(second.id, ImageUpdate(is_primary=True))

        flags = {img.id: img.is_primary for img in catalog.list_product_images(product.id)}
        assert flags == {first.id: False, second.id: True}

    def test_sort_order_auto_assigned(self, catalog, make_product):
        product = make_product()
        for n in range(3):
            catalog.create_product_image(product_image(product.id, n))

        assert [img.sort_order for img in catalog.list_product_images(product.id)] == [0, 1, 2]

    def test_sort_order_continues_after_max(self, catalog, make_product):
        product = make_product()
        catalog.create_product_image(product_image(product.id, 1, sort_order=7))
        created = catalog.create_product_image(product_image(product.id, 2))
        assert created.sort_order == 8

    def test_list_ordered_by_sort_order_then_id(self, catalog, make_category):
        category = make_category()
        late = catalog.create_category_image(category_image(category.id, 1, sort_order=5))
        early = catalog.create_category_image(category_image(category.id, 2, sort_order=1))
        tie = catalog.create_category_image(category_image(category.id, 3, sort_order=5))

        ids = [img.id for img in catalog.list_category_images(category.id)]
        assert ids == [early.id, late.id, tie.id]

    def test_primary_or_first_fallback(self, catalog, make_product):
        product = make_product()
        assert catalog.get_primary_product_image(product.id) is None

        first = catalog.create_product_image(product_image(product.id, 1, sort_order=3))
        catalog.create_product_image(product_image(product.id, 2, sort_order=4))
        assert catalog.get_primary_product_image(product.id).id == first.id

        flagged = catalog.create_product_image(product_image(product.id, 3, is_primary=True))
        assert catalog.get_primary_product_image(product.id).id == flagged.id

    def test_primary_images_batched_per_parent(self, catalog, make_category):
        kitchen = make_category("kitchen")
        dairy = make_category("dairy")
        empty = make_category("empty")
        kitchen_img = catalog.create_category_image(category_image(kitchen.id, 1))
        catalog.create_category_image(category_image(dairy.id, 2))
        dairy_primary = catalog.create_category_image(
            category_image(dairy.id, 3, is_primary=True)
        )

        result = catalog.primary_category_images([kitchen.id, dairy.id, empty.id])
        assert result[kitchen.id].id == kitchen_img.id
        assert result[dairy.id].id == dairy_primary.id
        assert empty.id not in result

    def test_image_for_missing_parent_rejected(self, catalog):
        with pytest.raises(InvalidReferenceError):
            catalog.create_product_image(product_image(12345))
        with pytest.raises(InvalidReferenceError):
            catalog.create_category_image(category_image(12345))

    def test_missing_image_update_and_delete(self, catalog):
        assert catalog.update_product_image(1, ImageUpdate(alt_text="x")) is None
        assert catalog.delete_category_image(1) is False

    def test_pick_primary_on_empty(self):
        assert pick_primary([]) is None


class TestSeed:
    def test_seed_fills_empty_catalog_once(self, catalog, db_session):
        assert seed_sample_catalog(db_session) is True
        assert len(catalog.list_categories()) == len(SAMPLE_CATEGORIES)
        assert len(catalog.list_products()) == len(SAMPLE_PRODUCTS)

        assert seed_sample_catalog(db_session) is False
        assert len(catalog.list_categories()) == len(SAMPLE_CATEGORIES)
