"""
Общие помощники прикладного слоя.
"""

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .domain import ValidationException

R = TypeVar("R", bound=BaseModel)


def parse_request(model_class: Type[R], request: Union[R, Mapping[str, Any]]) -> R:
    """
    Приводит входные данные к модели запроса.

    Ошибки pydantic переводятся в ValidationException, чтобы вызывающий код
    имел дело только с доменной таксономией ошибок.
    """
    if isinstance(request, model_class):
        return request
    try:
        if isinstance(request, BaseModel):
            return model_class.model_validate(request.model_dump())
        return model_class.model_validate(request)
    except ValidationError as e:
        raise ValidationException(_format_errors(e)) from e


def _format_errors(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "request"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)
