"""
Схемы для пагинации.
"""

from pydantic import BaseModel


class PageMeta(BaseModel):
    """
    Метаданные пагинации.

    Attributes:
        page: Номер текущей страницы
        page_size: Размер страницы
        total: Общее количество записей
        total_pages: Общее количество страниц
    """

    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def create(cls, page: int, page_size: int, total: int) -> "PageMeta":
        """Создает PageMeta с расчетом total_pages (минимум одна страница)."""
        total_pages = max(1, -(-total // page_size))
        return cls(page=page, page_size=page_size, total=total, total_pages=total_pages)

    @staticmethod
    def offset(page: int, page_size: int) -> int:
        """Смещение первой записи страницы."""
        return (page - 1) * page_size
