"""
Адаптер внешнего хостинга изображений.

Хостинг хранит байты изображения и возвращает набор URL
(оригинал, отображение, миниатюра) и ссылку для удаления.
Единый интерфейс позволяет подменять реализацию в тестах.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ImageHostError, ImageHostNotConfigured
from app.schemas.image import HostedImage

logger = logging.getLogger(__name__)


class ImageHost(ABC):
    """
    Абстрактный базовый класс для хостинга изображений.
    """

    @abstractmethod
    async def upload(self, data: bytes, name: Optional[str] = None) -> HostedImage:
        pass

    @abstractmethod
    async def delete(self, delete_url: str) -> bool:
        pass


class ImgBBImageHost(ImageHost):
    """
    Хостинг изображений ImgBB.

    Загрузка: POST {api_url}/upload?key=... с base64 содержимым в форме.
    Удаление: GET по delete_url, выданному при загрузке.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.imgbb.com/1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def upload(self, data: bytes, name: Optional[str] = None) -> HostedImage:
        form = {"image": base64.b64encode(data).decode("ascii")}
        if name:
            form["name"] = name

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.api_url}/upload",
                    params={"key": self.api_key},
                    data=form,
                )
        except httpx.HTTPError as exc:
            logger.error("ImgBB upload failed: %s", exc)
            raise ImageHostError("Failed to upload image") from exc

        if not response.is_success:
            logger.error(
                "ImgBB upload error: %s, %s", response.status_code, response.text[:500]
            )
            raise ImageHostError("Failed to upload image")

        try:
            payload = response.json()
            body = payload["data"]
            if not payload.get("success", False):
                raise ValueError("success=false")
            hosted = HostedImage(
                image_url=body["url"],
                display_url=body["display_url"],
                thumb_url=body["thumb"]["url"],
                delete_url=body["delete_url"],
            )
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Unexpected ImgBB response: %s", response.text[:500])
            raise ImageHostError("Image host returned an invalid response") from exc

        logger.info("Image uploaded to ImgBB: %s", hosted.display_url)
        return hosted

    async def delete(self, delete_url: str) -> bool:
        try:
            async with self._client() as client:
                response = await client.get(delete_url)
        except httpx.HTTPError as exc:
            logger.warning("ImgBB delete failed for %s: %s", delete_url, exc)
            return False
        return response.is_success


def get_image_host() -> ImageHost:
    """
    Dependency с настроенным хостингом изображений.

    Raises:
        ImageHostNotConfigured: Если не задан IMGBB_API_KEY
    """
    if not settings.IMGBB_API_KEY:
        raise ImageHostNotConfigured("Image hosting is not configured")
    return ImgBBImageHost(
        api_key=settings.IMGBB_API_KEY,
        api_url=settings.IMGBB_API_URL,
        timeout=settings.IMAGE_HOST_TIMEOUT,
    )
