"""
API эндпоинты для административной панели.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.core.auth import AdminIdentity, require_admin
from app.schemas.contact import ContactMessageOut
from app.schemas.pagination import PageMeta
from app.services.contact_service import ContactService, get_contact_service

router = APIRouter()


class ContactMessagePage(BaseModel):
    items: List[ContactMessageOut]
    meta: PageMeta


@router.get("/contacts", response_model=ContactMessagePage)
def list_contact_messages(
    page: int = Query(1, ge=1, description="Номер страницы"),
    page_size: int = Query(50, ge=1, le=200, description="Размер страницы"),
    admin: AdminIdentity = Depends(require_admin),
    service: ContactService = Depends(get_contact_service),
):
    """
    Получить заявки с контактной формы, новые первыми.

    Args:
        page: Номер страницы (с 1)
        page_size: Количество заявок на странице

    Returns:
        Заявки страницы и метаданные пагинации
    """
    items, total = service.list_messages(page=page, page_size=page_size)
    return ContactMessagePage(
        items=[ContactMessageOut.model_validate(item) for item in items],
        meta=PageMeta.create(page, page_size, total),
    )
