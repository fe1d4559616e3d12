"""
API эндпоинты хостинга изображений.

Загрузка файла возвращает набор URL, который затем передается
в POST /products/images или /categories/images. Удаление файла
с хостинга выполняется отдельно от удаления записи в БД.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from app.core.auth import AdminIdentity, require_admin
from app.core.exceptions import ImageHostError
from app.schemas.image import DeleteImageRequest, HostedImage
from app.services.image_host import ImageHost, get_image_host
from app.services.image_service import ImageService, get_image_service
from app.services.uploads import read_upload, upload_image

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=HostedImage)
async def upload(
    image: UploadFile = File(..., description="Файл изображения"),
    admin: AdminIdentity = Depends(require_admin),
    host: ImageHost = Depends(get_image_host),
    image_service: ImageService = Depends(get_image_service),
):
    """
    Загрузить изображение на хостинг.

    Raises:
        ImageValidationError: Файл пустой, слишком большой или не изображение (400)
        ImageHostError: Хостинг вернул ошибку (502)
    """
    return await upload_image(host, image_service, await read_upload(image))


@router.post("/delete-image")
async def delete_image(
    request: DeleteImageRequest,
    admin: AdminIdentity = Depends(require_admin),
    host: ImageHost = Depends(get_image_host),
):
    """Удалить изображение с хостинга по ссылке удаления."""
    if not await host.delete(request.delete_url):
        raise ImageHostError("Failed to delete image from hosting")
    return {"message": "Image deleted successfully"}
