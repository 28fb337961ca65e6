"""Pydantic schemas for forms and API responses."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.models import DEFAULT_COMMISSION_PERCENT, DEFAULT_SALE_STATUS


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, str):
        return value.strip()
    return value


def _quantize_cents(value: Decimal, max_digits: int) -> Decimal:
    """Round to cents, rejecting values wider than the NUMERIC column."""
    try:
        quantized = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Value is too large (at most {max_digits - 2} integer digits).") from None
    if len(quantized.as_tuple().digits) > max_digits:
        raise ValueError(f"Value is too large (at most {max_digits - 2} integer digits).")
    return quantized


def _required_text(value: Any, info: ValidationInfo) -> str:
    label = info.field_name.replace("_", " ").capitalize()
    if value is None:
        raise ValueError(f"{label} is required.")
    value_str = str(value).strip()
    if not value_str:
        raise ValueError(f"{label} cannot be empty.")
    return value_str


class AffiliateBase(BaseModel):
    customer_id: Optional[str] = Field(None, max_length=36)
    whatsapp: str = Field(..., min_length=1, max_length=40)
    link: Optional[str] = Field(None, max_length=500)
    commission_percent: Decimal = Field(default=DEFAULT_COMMISSION_PERCENT, ge=0)

    @field_validator("whatsapp", mode="before")
    def strip_whatsapp(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("customer_id", "link", mode="before")
    def optional_strings(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("commission_percent")
    def quantize_rate(cls, value: Decimal) -> Decimal:
        return _quantize_cents(value, 7)

    model_config = ConfigDict(from_attributes=True)


class AffiliateCreate(AffiliateBase):
    pass


class AffiliateUpdate(AffiliateBase):
    pass


class AffiliateRead(AffiliateBase):
    id: str
    created_at: datetime


class CustomerBase(BaseModel):
    nome: Optional[str] = Field(None, max_length=200)
    telefone: str = Field(..., min_length=1, max_length=40)
    email: Optional[str] = Field(None, max_length=200)
    cpf: Optional[str] = Field(None, max_length=20)

    @field_validator("telefone", mode="before")
    def strip_phone(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("nome", "email", "cpf", mode="before")
    def optional_strings(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("email")
    def validate_email(cls, value: str | None) -> str | None:
        if value is not None and "@" not in value:
            raise ValueError("Email must contain '@'.")
        return value

    @field_validator("cpf")
    def normalize_cpf(cls, value: str | None) -> str | None:
        if value is None:
            return None
        digits = "".join(char for char in value if char.isdigit())
        if len(digits) != 11:
            raise ValueError("CPF must have 11 digits.")
        return digits

    model_config = ConfigDict(from_attributes=True)


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(CustomerBase):
    pass


class SaleBase(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    product_name: str = Field(..., min_length=1, max_length=200)
    total_amount: Decimal = Field(..., ge=0)
    status: str = Field(default=DEFAULT_SALE_STATUS, max_length=30)
    customer_id: Optional[str] = Field(None, max_length=36)
    customer_name: Optional[str] = Field(None, max_length=200)
    payment_method: Optional[str] = Field(None, max_length=100)
    affiliate_id: Optional[str] = Field(None, max_length=36)

    @field_validator("code", "product_name", mode="before")
    def strip_required_strings(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("customer_id", "customer_name", "payment_method", "affiliate_id", mode="before")
    def optional_strings(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("status", mode="before")
    def default_status(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            return DEFAULT_SALE_STATUS
        return str(value).strip()

    @field_validator("total_amount")
    def quantize_amount(cls, value: Decimal) -> Decimal:
        return _quantize_cents(value, 12)

    model_config = ConfigDict(from_attributes=True)


class SaleCreate(SaleBase):
    pass


class SaleUpdate(SaleBase):
    pass


class DrawBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    image_path: Optional[str] = Field(None, max_length=500)
    status: bool = True
    date_of_draw: Optional[datetime] = None

    @field_validator("name", "description", mode="before")
    def strip_required_strings(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("image_path", "date_of_draw", mode="before")
    def optional_values(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("price")
    def quantize_price(cls, value: Decimal) -> Decimal:
        return _quantize_cents(value, 12)

    model_config = ConfigDict(from_attributes=True)


class DrawCreate(DrawBase):
    pass


class DrawUpdate(DrawBase):
    pass
