"""
Прием заявок с контактной формы.

Сообщение сохраняется в БД до попытки отправить уведомление,
поэтому сбой почты не отменяет сохранение.
"""

import logging
from typing import List, Tuple

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import EmailDeliveryError
from app.db.database import get_db
from app.db.models import ContactMessage
from app.schemas.contact import ContactMessageCreate
from app.schemas.pagination import PageMeta
from app.services.email_service import ContactNotifier, get_contact_notifier

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, db: Session, notifier: ContactNotifier):
        self.db = db
        self.notifier = notifier

    async def submit(self, data: ContactMessageCreate) -> ContactMessage:
        """Сохранить заявку и попытаться уведомить компанию."""
        message = ContactMessage(**data.model_dump())
        self.db.add(message)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(message)
        logger.info("Contact message %s stored", message.id)

        try:
            await self.notifier.notify(message)
        except EmailDeliveryError:
            logger.exception("Notification for contact message %s failed", message.id)

        return message

    def list_messages(
        self, page: int = 1, page_size: int = 50
    ) -> Tuple[List[ContactMessage], int]:
        """Заявки, новые первыми, с общим количеством."""
        total = self.db.scalar(select(func.count(ContactMessage.id))) or 0
        stmt = (
            select(ContactMessage)
            .order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
            .offset(PageMeta.offset(page, page_size))
            .limit(page_size)
        )
        return list(self.db.scalars(stmt)), total


def get_contact_service(
    db: Session = Depends(get_db),
    notifier: ContactNotifier = Depends(get_contact_notifier),
) -> ContactService:
    """Dependency с сервисом заявок для текущего запроса."""
    return ContactService(db, notifier)
