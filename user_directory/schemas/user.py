"""User request/response schemas - API contract and field validation."""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from user_directory.core.errors import RecordValidationError

DEFAULT_COUNTRY_CODE = "+1"

EMAIL_PATTERN = re.compile(
    r'(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r"@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))"
)

MIN_PHONE_DIGITS = 10

# Wire format is camelCase (countryCode, createdAt); attributes stay snake_case.
_camel_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _required_text(value: Any, error_type: str, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError(error_type, message)
    return value.strip()


class FieldError(BaseModel):
    """A single failed rule, attributed to a wire field name."""

    field: str
    message: str


class UserFields(BaseModel):
    """Writable user fields. Every rule runs, so all failures are reported together."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(None, validate_default=True)
    email: str = Field(None, validate_default=True)
    phone: str = Field(None, validate_default=True)
    country_code: str = Field(None, validate_default=True)
    place: str = Field(None, validate_default=True)
    gender: str = Field(None, validate_default=True)
    hobbies: list[str] = Field(None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: Any) -> str:
        return _required_text(value, "name_required", "Name is required")

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, value: Any) -> str:
        email = _required_text(value, "email_required", "Email is required")
        if not EMAIL_PATTERN.fullmatch(email):
            raise PydanticCustomError("email_invalid", "Please provide a valid email")
        return email

    @field_validator("phone", mode="before")
    @classmethod
    def _check_phone(cls, value: Any) -> str:
        phone = _required_text(value, "phone_required", "Phone number is required")
        if len(re.sub(r"\D", "", phone)) < MIN_PHONE_DIGITS:
            raise PydanticCustomError("phone_too_short", "Phone number is too short")
        return phone

    @field_validator("country_code", mode="before")
    @classmethod
    def _check_country_code(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_COUNTRY_CODE
        return _required_text(value, "country_code_required", "Country code is required")

    @field_validator("place", mode="before")
    @classmethod
    def _check_place(cls, value: Any) -> str:
        return _required_text(value, "place_required", "Place is required")

    @field_validator("gender", mode="before")
    @classmethod
    def _check_gender(cls, value: Any) -> str:
        return _required_text(value, "gender_required", "Gender is required")

    @field_validator("hobbies", mode="before")
    @classmethod
    def _check_hobbies(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)) or len(value) == 0:
            raise PydanticCustomError("hobbies_required", "At least one hobby is required")
        if not all(isinstance(h, str) for h in value):
            raise PydanticCustomError("hobbies_type", "Hobbies must be a list of strings")
        return list(value)


class UserCreate(UserFields):
    """Create payload: countryCode falls back to the default when omitted."""


class UserUpdate(UserFields):
    """Update payload: countryCode must be sent explicitly."""

    @field_validator("country_code", mode="before")
    @classmethod
    def _check_country_code(cls, value: Any) -> str:
        return _required_text(value, "country_code_required", "Country code is required")


def _wire_name(schema: type[BaseModel], loc: tuple) -> str:
    """Name a failed field the way callers send it, whichever name pydantic put in ``loc``."""
    if not loc:
        return "body"
    name = str(loc[0])
    info = schema.model_fields.get(name)
    if info is not None and info.alias:
        return info.alias
    return name


def _field_errors(exc: ValidationError, schema: type[BaseModel]) -> list[FieldError]:
    return [FieldError(field=_wire_name(schema, err["loc"]), message=err["msg"]) for err in exc.errors()]


def parse_user(candidate: Any, *, for_update: bool = False) -> UserFields:
    """Validate a raw payload. Raises RecordValidationError listing every failed field."""
    schema = UserUpdate if for_update else UserCreate
    if not isinstance(candidate, Mapping):
        raise RecordValidationError([FieldError(field="body", message="Request body must be an object")])
    try:
        return schema.model_validate(dict(candidate))
    except ValidationError as exc:
        raise RecordValidationError(_field_errors(exc, schema)) from exc


def validate_user(candidate: Any, *, for_update: bool = False) -> list[FieldError]:
    """Return all field errors for a payload (empty list when valid)."""
    try:
        parse_user(candidate, for_update=for_update)
    except RecordValidationError as exc:
        return exc.errors
    return []


class UserRecord(BaseModel):
    """Stored user as returned to callers."""

    model_config = _camel_config

    id: str
    name: str
    email: str
    country_code: str
    phone: str
    place: str
    gender: str
    hobbies: list[str]
    created_at: datetime
    updated_at: datetime


class UserEnvelope(BaseModel):
    success: bool = True
    data: UserRecord


class UserPage(BaseModel):
    """List response: one page of records plus totals."""

    model_config = _camel_config

    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    data: list[UserRecord]
    message: str | None = None


class UserQuery(BaseModel):
    """Raw list-query parameters, as received from the caller."""

    model_config = _camel_config

    search: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    place: str | None = None
    gender: str | None = None
    country_code: str | None = None
    hobbies: list[str] | None = None
    page: str | int | None = None
    limit: str | int | None = None
    sort: str | None = None
