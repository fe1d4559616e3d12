"""
Загрузка изображений на хостинг перед записью в БД.

Порядок всегда один: сначала байты уходят на хостинг, и только после
успешной загрузки всех файлов URL сохраняются в БД. Если загрузка
одного файла не удалась, уже загруженные файлы пакета удаляются
с хостинга, а ошибка пробрасывается дальше - БД не трогается.
"""

import logging
from typing import Callable, List, NamedTuple, Optional, Sequence, TypeVar

from fastapi import UploadFile

from app.schemas.image import HostedImage
from app.services.image_host import ImageHost
from app.services.image_service import ImageService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ImagePayload(NamedTuple):
    """Файл изображения из запроса."""

    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


async def read_upload(file: UploadFile) -> ImagePayload:
    """Прочитать UploadFile в память."""
    data = await file.read()
    return ImagePayload(file.filename, file.content_type, data)


async def upload_image(
    host: ImageHost, image_service: ImageService, payload: ImagePayload
) -> HostedImage:
    """Проверить и загрузить одно изображение."""
    image_service.validate_upload(payload.filename, payload.content_type, payload.data)
    return await host.upload(payload.data, payload.filename)


async def upload_images(
    host: ImageHost, image_service: ImageService, payloads: Sequence[ImagePayload]
) -> List[HostedImage]:
    """
    Загрузить пакет изображений последовательно.

    Все файлы проверяются до первой загрузки, чтобы заведомо
    неподходящий файл не оставлял на хостинге лишних копий.
    """
    for payload in payloads:
        image_service.validate_upload(payload.filename, payload.content_type, payload.data)

    uploaded: List[HostedImage] = []
    try:
        for payload in payloads:
            uploaded.append(await host.upload(payload.data, payload.filename))
    except Exception:
        await discard_uploaded(host, uploaded)
        raise
    return uploaded


async def discard_uploaded(host: ImageHost, images: Sequence[HostedImage]) -> None:
    """Удалить с хостинга изображения, которые не попадут в БД."""
    for image in images:
        if not await host.delete(image.delete_url):
            logger.warning("Could not remove orphaned image %s", image.delete_url)


async def store_uploaded(
    host: ImageHost, images: Sequence[HostedImage], persist: Callable[[], T]
) -> T:
    """Сохранить URL в БД; при ошибке убрать загруженные файлы с хостинга."""
    try:
        return persist()
    except Exception:
        await discard_uploaded(host, images)
        raise
