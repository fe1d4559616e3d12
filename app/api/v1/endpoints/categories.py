"""
API endpoints для работы с категориями товаров.

Публичные операции: список категорий с главным изображением,
поиск по slug и по ID. Остальные операции (включая управление
изображениями категорий) доступны только администратору.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.api.v1.forms import parse_form_json
from app.core.auth import AdminIdentity, require_admin
from app.core.exceptions import ConflictError
from app.db.models import Category
from app.schemas.category import (
    CategoryCreate,
    CategoryDetail,
    CategoryOut,
    CategoryUpdate,
    CategoryWithImage,
)
from app.schemas.image import (
    CategoryImageCreate,
    CategoryImageOut,
    ImageFields,
    ImageUpdate,
)
from app.services.catalog_service import CatalogService, get_catalog_service
from app.services.image_host import ImageHost, get_image_host
from app.services.image_service import ImageService, get_image_service
from app.services.uploads import read_upload, store_uploaded, upload_image, upload_images

router = APIRouter()


def _with_image(category: Category, image) -> CategoryWithImage:
    return CategoryWithImage(
        **CategoryOut.model_validate(category).model_dump(),
        image=image.display_url if image else None,
    )


def _detail(service: CatalogService, category: Category) -> CategoryDetail:
    return CategoryDetail(
        **CategoryOut.model_validate(category).model_dump(),
        images=[
            CategoryImageOut.model_validate(img)
            for img in service.list_category_images(category.id)
        ],
    )


@router.get("", response_model=List[CategoryWithImage])
def list_categories(service: CatalogService = Depends(get_catalog_service)):
    """
    Получить список всех категорий.

    Для каждой категории возвращается URL главного изображения
    (или первого по порядку, если главное не отмечено).

    Example:
        [
            {"id": 1, "slug": "kitchen", "name": "Kitchen Scales", "image": "https://..."}
        ]
    """
    categories = service.list_categories()
    primaries = service.primary_category_images([c.id for c in categories])
    return [_with_image(c, primaries.get(c.id)) for c in categories]


@router.get("/slug/{slug}", response_model=CategoryWithImage)
def get_category_by_slug(
    slug: str, service: CatalogService = Depends(get_catalog_service)
):
    """
    Получить категорию по slug (точное совпадение с учетом регистра).

    Raises:
        HTTPException: Если категория не найдена
    """
    category = service.get_category_by_slug(slug)
    if not category:
        raise HTTPException(404, detail="Category not found")
    return _with_image(category, service.get_primary_category_image(category.id))


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Создать категорию.

    Raises:
        ConflictError: Если slug уже занят (409)
    """
    return service.create_category(category_data)


@router.post(
    "/with-images", response_model=CategoryDetail, status_code=status.HTTP_201_CREATED
)
async def create_category_with_images(
    data: str = Form(..., description="JSON с полями категории"),
    images: List[UploadFile] = File(..., description="Изображения категории"),
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
    host: ImageHost = Depends(get_image_host),
    image_service: ImageService = Depends(get_image_service),
):
    """
    Создать категорию сразу с изображениями.

    Сначала все файлы загружаются на хостинг, затем категория и
    изображения записываются одной транзакцией. Первое изображение
    становится главным.
    """
    category_data = parse_form_json(CategoryCreate, data)
    if service.get_category_by_slug(category_data.slug):
        raise ConflictError(f"Category with slug '{category_data.slug}' already exists")

    payloads = [await read_upload(file) for file in images]
    hosted = await upload_images(host, image_service, payloads)
    fields = [
        ImageFields(**image.model_dump(), is_primary=index == 0, sort_order=index)
        for index, image in enumerate(hosted)
    ]

    category = await store_uploaded(
        host, hosted, lambda: service.create_category_with_images(category_data, fields)
    )
    return _detail(service, category)


@router.post(
    "/images", response_model=CategoryImageOut, status_code=status.HTTP_201_CREATED
)
def create_category_image(
    image_data: CategoryImageCreate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Добавить изображение категории по готовому набору URL.

    URL и ссылка удаления получены заранее через /upload.
    """
    return service.create_category_image(image_data)


@router.put("/images/{image_id}", response_model=CategoryImageOut)
def update_category_image(
    image_id: int,
    image_data: ImageUpdate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """Обновить изображение категории."""
    image = service.update_category_image(image_id, image_data)
    if not image:
        raise HTTPException(404, detail="Category image not found")
    return image


@router.delete("/images/{image_id}")
def delete_category_image(
    image_id: int,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """Удалить изображение категории."""
    if not service.delete_category_image(image_id):
        raise HTTPException(404, detail="Category image not found")
    return {"message": "Category image deleted successfully"}


@router.get("/{category_id}", response_model=CategoryWithImage)
def get_category(
    category_id: int, service: CatalogService = Depends(get_catalog_service)
):
    """
    Получить категорию по ID.

    Raises:
        HTTPException: Если категория не найдена
    """
    category = service.get_category_by_id(category_id)
    if not category:
        raise HTTPException(404, detail="Category not found")
    return _with_image(category, service.get_primary_category_image(category.id))


@router.get("/{category_id}/images", response_model=List[CategoryImageOut])
def list_category_images(
    category_id: int,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """Получить изображения категории в порядке отображения."""
    if not service.get_category_by_id(category_id):
        raise HTTPException(404, detail="Category not found")
    return service.list_category_images(category_id)


@router.post(
    "/{category_id}/images/upload",
    response_model=CategoryImageOut,
    status_code=status.HTTP_201_CREATED,
)
async def upload_category_image(
    category_id: int,
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
    Загрузить файл на хостинг и добавить его к категории.

    Если запись в БД не удалась, файл удаляется с хостинга.
    """
    if not service.get_category_by_id(category_id):
        raise HTTPException(404, detail="Category not found")

    hosted = await upload_image(host, image_service, await read_upload(file))
    image_data = CategoryImageCreate(
        **hosted.model_dump(),
        category_id=category_id,
        alt_text=alt_text,
        sort_order=sort_order,
        is_primary=is_primary,
    )
    return await store_uploaded(
        host, [hosted], lambda: service.create_category_image(image_data)
    )


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """Частично обновить категорию."""
    category = service.update_category(category_id, category_data)
    if not category:
        raise HTTPException(404, detail="Category not found")
    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    admin: AdminIdentity = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """
    Удалить категорию вместе с ее изображениями.

    Raises:
        ConflictError: Если в категории есть товары (409)
    """
    if not service.delete_category(category_id):
        raise HTTPException(404, detail="Category not found")
    return {"message": "Category deleted successfully"}
