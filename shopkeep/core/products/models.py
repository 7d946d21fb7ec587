import html
from collections.abc import Mapping
from typing import Any

import bleach
import pydantic
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from shopkeep.core.errors import ValidationError


# One message per field, whatever pydantic complained about
FIELD_MESSAGES = {
    "name": "Must be a non-empty string",
    "sku": "Must be a non-empty string",
    "price": "Must be a number > 0",
    "stock": "Must be an integer >= 0",
    "category": "Must be a non-empty string",
}


class ProductDraft(BaseModel):
    """Candidate product fields, validated before create and after an update merge"""

    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    price: float = Field(..., gt=0, allow_inf_nan=False)
    stock: int = Field(..., ge=0)
    category: str = Field(..., min_length=1)

    @field_validator("name", "sku", "category")
    @classmethod
    def check_text(cls, v: str, info: ValidationInfo) -> str:
        """Strip markup from name and category; otherwise keep the text as sent"""
        if info.field_name != "sku":
            # bleach escapes what it keeps, the stored value is plain text
            v = html.unescape(bleach.clean(v, tags=[], strip=True))
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class Product(BaseModel):
    """A stored product record"""

    id: str
    name: str
    sku: str
    price: float
    stock: int
    category: str


def validate_product(candidate: Any) -> ProductDraft:
    """
    Validate a full candidate product.

    All violations are collected, one entry per field, in field order.

    Raises:
        ValidationError: listing every violated field as {field, message}
    """
    if not isinstance(candidate, Mapping):
        raise ValidationError(details=[{"field": "body", "message": "Invalid body"}])

    try:
        return ProductDraft.model_validate(dict(candidate))
    except pydantic.ValidationError as e:
        violated = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "body"
            if field not in violated:
                violated.append(field)

        ordered = [f for f in FIELD_MESSAGES if f in violated]
        ordered += [f for f in violated if f not in FIELD_MESSAGES]
        raise ValidationError(
            details=[
                {"field": f, "message": FIELD_MESSAGES.get(f, "Invalid value")}
                for f in ordered
            ]
        ) from e
