"""
Pydantic схемы контактной формы.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class ContactMessageCreate(BaseModel):
    """Заявка с контактной формы. Все поля обязательны."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)

    # Однострочные поля; subject попадает в заголовок письма
    @field_validator("name", "phone", "subject")
    @classmethod
    def single_line(cls, value: str) -> str:
        if "\r" in value or "\n" in value:
            raise ValueError("must be a single line")
        return value


class ContactMessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str
    subject: str
    message: str
    created_at: Optional[datetime] = None


class ContactSubmitResponse(BaseModel):
    message: str
    data: ContactMessageOut
