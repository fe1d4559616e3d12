"""
API endpoints для работы с товарами.

Чтение каталога (списки, подборки витрины, карточка товара) доступно
всем. Создание, изменение, удаление товаров и их изображений требует
токена администратора.
"""

from typing import List, Optional, Sequence

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.api.v1.forms import parse_form_json
from app.core.auth import AdminIdentity, require_admin
from app.db.models import Product
from app.schemas.image import ImageFields, ImageUpdate, ProductImageCreate, ProductImageOut
from app.schemas.product import (
    ProductCreate,
    ProductDetail,
    ProductOut,
    ProductUpdate,
    ProductWithImage,
)
from app.services.catalog_service import CatalogService, get_catalog_service
from app.services.image_host import ImageHost, get_image_host
from app.services.image_service import ImageService, get_image_service
from app.services.uploads import read_upload, store_uploaded, upload_image, upload_images

router = APIRouter()


def _with_images(
    service: CatalogService, products: Sequence[Product]
) -> List[ProductWithImage]:
    """Дополнить товары URL главного изображения."""
    primaries = service.primary_product_images([p.id for p in products])
    result = []
    for product in products:
        image = primaries.get(product.id)
        result.append(
            ProductWithImage(
                **ProductOut.model_validate(product).model_dump(),
                image=image.display_url if image else None,
            )
        )
    return result


def _detail(service: CatalogService, product: Product) -> ProductDetail:
    return ProductDetail(
        **ProductOut.model_validate(product).model_dump(),
        images=[
            ProductImageOut.model_validate(img)
            for img in service.list_product_images(product.id)
        ],
    )


# ==================== ПУБЛИЧНЫЕ ====================


@router.get("", response_model=List[ProductWithImage])
def list_products(service: CatalogService = Depends(get_catalog_service)):
    """
    Получить список всех товаров.

    Каждый товар содержит поле image с URL главного изображения
    (или первого по порядку). Если изображений нет, image = null.
    """
    return _with_images(service, service.list_products())


@router.get("/featured", response_model=List[ProductWithImage])
def list_featured(service: CatalogService = Depends(get_catalog_service)):
    """Рекомендуемые товары."""
    return _with_images(service, service.list_featured())


@router.get("/bestsellers", response_model=List[ProductWithImage])
def list_bestsellers(service: CatalogService = Depends(get_catalog_service)):
    return _with_images(service, service.list_bestsellers())


@router.get("/new-arrivals", response_model=List[ProductWithImage])
def list_new_arrivals(service: CatalogService = Depends(get_catalog_service)):
    return _with_images(service, service.list_new_arrivals())


@router.get("/category/{slug}", response_model=List[ProductWithImage])
def list_products_by_category(
    slug: str, service: CatalogService = Depends(get_catalog_service)
):
    """
    Получить товары категории по slug.

    Для неизвестного slug возвращается пустой список, а не 404.
    """
    return _with_images(service, service.list_products_by_category_slug(slug))


# ==================== АДМИНИСТРИРОВАНИЕ ====================


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    product_data: ProductCreate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Создать товар.

    Raises:
        InvalidReferenceError: Если category_id указывает на несуществующую категорию
    """
    return service.create_product(product_data)


@router.post(
    "/with-images", response_model=ProductDetail, status_code=status.HTTP_201_CREATED
)
async def create_product_with_images(
    data: str = Form(..., description="JSON с полями товара"),
    images: List[UploadFile] = File(..., description="Изображения товара"),
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
    host: ImageHost = Depends(get_image_host),
    image_service: ImageService = Depends(get_image_service),
):
    """
    Создать товар сразу с изображениями.

    Файлы загружаются на хостинг до записи в БД. Если запись не
    удалась, загруженные файлы удаляются с хостинга. Первое
    изображение становится главным.

    Example:
        curl -X POST /api/v1/products/with-images \\
            -H "Authorization: Bearer <token>" \\
            -F 'data={"name": "Scale", "description": "...", "price": 999}' \\
            -F images=@front.jpg -F images=@side.jpg
    """
    product_data = parse_form_json(ProductCreate, data)
    # Ссылку на категорию проверяем до загрузки файлов
    service.ensure_category(product_data.category_id)

    payloads = [await read_upload(file) for file in images]
    hosted = await upload_images(host, image_service, payloads)
    fields = [
        ImageFields(**image.model_dump(), is_primary=index == 0, sort_order=index)
        for index, image in enumerate(hosted)
    ]

    product = await store_uploaded(
        host, hosted, lambda: service.create_product_with_images(product_data, fields)
    )
    return _detail(service, product)


@router.post(
    "/images", response_model=ProductImageOut, status_code=status.HTTP_201_CREATED
)
def create_product_image(
    image_data: ProductImageCreate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Добавить изображение товара по готовому набору URL.

    Если is_primary=True, остальные изображения товара перестают
    быть главными.
    """
    return service.create_product_image(image_data)


@router.put("/images/{image_id}", response_model=ProductImageOut)
def update_product_image(
    image_id: int,
    image_data: ImageUpdate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    image = service.update_product_image(image_id, image_data)
    if not image:
        raise HTTPException(404, detail="Product image not found")
    return image


@router.delete("/images/{image_id}")
def delete_product_image(
    image_id: int,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Удалить запись об изображении товара.

    Файл на хостинге не удаляется: для этого есть /delete-image.
    """
    if not service.delete_product_image(image_id):
        raise HTTPException(404, detail="Product image not found")
    return {"message": "Product image deleted successfully"}


# ==================== ТОВАР ПО ID ====================


@router.get("/{product_id}", response_model=ProductDetail)
def get_product(product_id: int, service: CatalogService = Depends(get_catalog_service)):
    """
    Получить товар по ID со всеми изображениями.

    Raises:
        HTTPException: Если товар не найден
    """
    product = service.get_product_by_id(product_id)
    if not product:
        raise HTTPException(404, detail="Product not found")
    return _detail(service, product)


@router.get("/{product_id}/images", response_model=List[ProductImageOut])
def list_product_images(
    product_id: int, service: CatalogService = Depends(get_catalog_service)
):
    """Изображения товара в порядке отображения."""
    if not service.get_product_by_id(product_id):
        raise HTTPException(404, detail="Product not found")
    return service.list_product_images(product_id)


@router.get("/{product_id}/primary-image", response_model=ProductImageOut)
def get_primary_product_image(
    product_id: int, service: CatalogService = Depends(get_catalog_service)
):
    """Главное изображение товара (или первое по порядку)."""
    image = service.get_primary_product_image(product_id)
    if not image:
        raise HTTPException(404, detail="Product image not found")
    return image


@router.post(
    "/{product_id}/images/upload",
    response_model=ProductImageOut,
    status_code=status.HTTP_201_CREATED,
)
async def upload_product_image(
    product_id: int,
    file: UploadFile = File(...),
    alt_text: Optional[str] = Form(None),
    sort_order: Optional[int] = Form(None, ge=0),
    is_primary: bool = Form(False),
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
    host: ImageHost = Depends(get_image_host),
    image_service: ImageService = Depends(get_image_service),
):
    """
    Загрузить файл на хостинг и добавить его к товару.

    Args:
        product_id: ID товара
        file: Файл изображения
        alt_text: Альтернативный текст
        sort_order: Позиция (по умолчанию в конец)
        is_primary: Сделать главным изображением
    """
    if not service.get_product_by_id(product_id):
        raise HTTPException(404, detail="Product not found")

    hosted = await upload_image(host, image_service, await read_upload(file))
    image_data = ProductImageCreate(
        **hosted.model_dump(),
        product_id=product_id,
        alt_text=alt_text,
        sort_order=sort_order,
        is_primary=is_primary,
    )
    return await store_uploaded(
        host, [hosted], lambda: service.create_product_image(image_data)
    )


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """Частично обновить товар. Не переданные поля не меняются."""
    product = service.update_product(product_id, product_data)
    if not product:
        raise HTTPException(404, detail="Product not found")
    return product


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """Удалить товар вместе с изображениями."""
    if not service.delete_product(product_id):
        raise HTTPException(404, detail="Product not found")
    return {"message": "Product deleted successfully"}
