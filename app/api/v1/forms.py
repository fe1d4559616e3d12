"""
Разбор JSON полей multipart форм.

В запросах с файлами данные сущности передаются строкой JSON
в поле формы. Ошибки валидации возвращаются так же, как ошибки тела.
"""

from typing import Type, TypeVar

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


def parse_form_json(model: Type[M], raw: str, field: str = "data") -> M:
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        errors = []
        for error in exc.errors():
            errors.append({**error, "loc": ("body", field, *error.get("loc", ()))})
        raise RequestValidationError(errors) from exc
