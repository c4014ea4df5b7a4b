from datetime import date
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    computed_field,
    field_validator,
)
from pydantic_core import PydanticCustomError

from helpers import entity_url, format_date
from models import BookInstanceStatus
from .shared import BookBase, FormDate, FormModel, FormText


class BookInstanceCreate(FormModel):
    book_id: int = Field(None, alias="book")
    imprint: FormText = ""
    status: BookInstanceStatus = BookInstanceStatus.maintenance
    due_back: FormDate = None

    @field_validator("book_id", mode="wrap")
    @classmethod
    def book_reference(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> int:
        if isinstance(value, str):
            value = value.strip()
        try:
            return handler(value)
        except ValidationError:
            raise PydanticCustomError("reference", "Book must be specified") from None

    @field_validator("imprint")
    @classmethod
    def imprint_given(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "Imprint must be specified")
        return value

    @field_validator("status", mode="wrap")
    @classmethod
    def known_status(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> BookInstanceStatus:
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            return BookInstanceStatus.maintenance
        try:
            return handler(value)
        except ValidationError:
            raise PydanticCustomError("status", "Invalid status") from None

    @field_validator("due_back", mode="wrap")
    @classmethod
    def due_back_or_today(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> date:
        try:
            parsed = handler(value)
        except (ValidationError, ValueError):
            raise PydanticCustomError("date", "Invalid date") from None
        return parsed or date.today()


class BookInstanceRead(BaseModel):
    id: int
    book_id: int
    imprint: str
    status: BookInstanceStatus = BookInstanceStatus.maintenance
    due_back: date | None = None
    book: BookBase | None = None

    @computed_field
    @property
    def due_back_formatted(self) -> str:
        return format_date(self.due_back)

    @computed_field
    @property
    def url(self) -> str:
        return entity_url("bookinstance", self.id)

    class Config:
        from_attributes = True
        use_enum_values = True
