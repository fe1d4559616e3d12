"""
Сервис проверки загружаемых изображений.

Перед отправкой на хостинг файл проверяется по размеру, расширению,
MIME типу и тому, что Pillow может его прочитать.
"""

import io
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.core.exceptions import ImageValidationError


class ImageService:
    """
    Сервис для работы с изображениями перед загрузкой.

    Обеспечивает:
    - Валидацию размера и типа файла
    - Проверку, что содержимое действительно является изображением
    - Извлечение базовых метаданных (размеры, формат)
    """

    SUPPORTED_MIME_TYPES = {
        'image/jpeg', 'image/jpg', 'image/png',
        'image/webp', 'image/gif'
    }

    MAX_DIMENSIONS = (4000, 4000)  # 4000x4000 пикселей

    def __init__(self, max_file_size: int = None, allowed_types: List[str] = None):
        self.max_file_size = max_file_size or settings.MAX_IMAGE_SIZE
        self.allowed_extensions = {
            f".{ext}" for ext in (allowed_types or settings.allowed_image_types)
        }

    def validate_upload(
        self, filename: Optional[str], content_type: Optional[str], data: bytes
    ) -> Dict[str, Any]:
        """
        Валидация загруженного файла.

        Args:
            filename: Имя файла от клиента
            content_type: MIME тип из запроса
            data: Содержимое файла

        Returns:
            Dict[str, Any]: Метаданные изображения (width, height, format)

        Raises:
            ImageValidationError: Если файл не подходит
        """
        if not data:
            raise ImageValidationError("No image file provided")

        # Проверка размера файла
        if len(data) > self.max_file_size:
            raise ImageValidationError(
                f"File size exceeds maximum allowed size of {self.max_file_size} bytes"
            )

        # Проверка расширения файла
        if filename:
            file_ext = Path(filename).suffix.lower()
            if file_ext not in self.allowed_extensions:
                raise ImageValidationError(
                    f"Unsupported file format: {file_ext or 'none'}. "
                    f"Supported: {', '.join(sorted(self.allowed_extensions))}"
                )

        # Проверка MIME типа (из запроса или по имени файла)
        mime_type = content_type
        if not mime_type or mime_type == "application/octet-stream":
            mime_type, _ = mimetypes.guess_type(filename or "")
        if mime_type and mime_type not in self.SUPPORTED_MIME_TYPES:
            raise ImageValidationError(f"Unsupported MIME type: {mime_type}")

        return self.extract_metadata(data)

    def _check_dimensions(self, width: int, height: int) -> None:
        max_width, max_height = self.MAX_DIMENSIONS
        if width > max_width or height > max_height:
            raise ImageValidationError(
                f"Image dimensions {width}x{height} exceed maximum {max_width}x{max_height}"
            )

    def extract_metadata(self, data: bytes) -> Dict[str, Any]:
        """
        Прочитать изображение и вернуть его размеры и формат.

        Размеры проверяются до полной проверки файла: заголовок
        с огромными размерами не должен доходить до декодирования.
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                width, height = img.size
                format_name = img.format
                self._check_dimensions(width, height)
                img.verify()
        except Image.DecompressionBombError as exc:
            raise ImageValidationError("Image dimensions are too large") from exc
        except (UnidentifiedImageError, OSError, SyntaxError) as exc:
            raise ImageValidationError("File is not a valid image") from exc

        return {
            'width': width,
            'height': height,
            'format': format_name,
            'mime_type': f"image/{format_name.lower()}" if format_name else None,
        }


def get_image_service() -> ImageService:
    """Dependency с сервисом проверки изображений."""
    return ImageService()
