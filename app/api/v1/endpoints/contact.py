"""
API эндпоинт контактной формы.
"""

from fastapi import APIRouter, Depends, status

from app.schemas.contact import ContactMessageCreate, ContactMessageOut, ContactSubmitResponse
from app.services.contact_service import ContactService, get_contact_service

router = APIRouter()


@router.post("", response_model=ContactSubmitResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(
    contact_data: ContactMessageCreate,
    service: ContactService = Depends(get_contact_service),
):
    """
    Принять заявку с контактной формы.

    Заявка сохраняется всегда; если письмо компании отправить не
    удалось, клиент все равно получает успешный ответ.
    """
    message = await service.submit(contact_data)
    return ContactSubmitResponse(
        message="Message sent successfully",
        data=ContactMessageOut.model_validate(message),
    )
