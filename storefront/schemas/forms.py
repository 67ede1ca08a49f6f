"""
Form schemas

Structural validation of user input, with the messages shown next to each
field. ``field_errors_from`` flattens a pydantic ValidationError into
``{field: [message, ...]}``.
"""
import re
from typing import Dict, List, Literal

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from storefront.core.config import settings

ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

_VALUE_ERROR_PREFIX = "Value error, "


def field_errors_from(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "form"
        message = error["msg"]
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        errors.setdefault(field, []).append(message)
    return errors


def _check_email(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Email is required")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please enter a valid email address")
    return value.lower()


def _min_length(value: str, length: int, label: str, message: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    if len(value) < length:
        raise ValueError(message)
    return value


class AddToCartForm(BaseModel):
    product_id: int
    quantity: int = 1

    @field_validator("product_id")
    @classmethod
    def product_required(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Product ID is required")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1")
        if v > settings.MAX_CART_LINE_QUANTITY:
            raise ValueError(f"Quantity cannot exceed {settings.MAX_CART_LINE_QUANTITY}")
        return v


class LoginForm(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RegisterForm(BaseModel):
    name: str
    email: str
    password: str
    confirm_password: str

    @field_validator("name")
    @classmethod
    def name_valid(cls, v: str) -> str:
        return _min_length(v, 2, "Name", "Name must be at least 2 characters")

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")
        return v

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and v != password:
            raise ValueError("Passwords don't match")
        return v


class CheckoutForm(BaseModel):
    first_name: str
    last_name: str
    email: str
    address: str
    city: str
    state: str
    zip_code: str
    payment_method: Literal["card", "paypal", "apple-pay"] = "card"
    agree_to_terms: bool = Field(False, validate_default=True)

    @field_validator("first_name")
    @classmethod
    def first_name_valid(cls, v: str) -> str:
        return _min_length(v, 2, "First name", "First name must be at least 2 characters")

    @field_validator("last_name")
    @classmethod
    def last_name_valid(cls, v: str) -> str:
        return _min_length(v, 2, "Last name", "Last name must be at least 2 characters")

    @field_validator("email")
    @classmethod
    def email_valid(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("address")
    @classmethod
    def address_valid(cls, v: str) -> str:
        return _min_length(v, 5, "Address", "Please enter a complete address")

    @field_validator("city")
    @classmethod
    def city_valid(cls, v: str) -> str:
        return _min_length(v, 2, "City", "City must be at least 2 characters")

    @field_validator("state")
    @classmethod
    def state_valid(cls, v: str) -> str:
        return _min_length(v, 2, "State", "State must be at least 2 characters")

    @field_validator("zip_code")
    @classmethod
    def zip_code_valid(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ZIP code is required")
        if not ZIP_CODE_PATTERN.match(v):
            raise ValueError("Please enter a valid ZIP code")
        return v

    @field_validator("agree_to_terms")
    @classmethod
    def terms_accepted(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must agree to the terms and conditions")
        return v
