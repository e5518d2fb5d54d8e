from decimal import Decimal, InvalidOperation
from typing import Annotated
from pydantic import BaseModel, BeforeValidator, PlainSerializer
from pydantic.alias_generators import to_camel

ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Best-effort numeric coercion; missing or malformed values count as zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    return result if result.is_finite() else ZERO


Money = Annotated[
    Decimal,
    BeforeValidator(to_decimal),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
