import re
from datetime import date

from pydantic import (
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    computed_field,
    field_validator,
)
from pydantic_core import PydanticCustomError

from helpers import format_date
from .shared import ALPHANUMERIC, AuthorBase, FormDate, FormModel, FormText

NAME_LABELS = {"first_name": "First name", "family_name": "Family name"}


class AuthorCreate(FormModel):
    first_name: FormText = ""
    family_name: FormText = ""
    date_of_birth: FormDate = None
    date_of_death: FormDate = None

    @field_validator("first_name", "family_name")
    @classmethod
    def name_is_alphanumeric(cls, value: str, info: ValidationInfo) -> str:
        label = NAME_LABELS[info.field_name]
        if not value:
            raise PydanticCustomError(
                "required", "{label} must be specified.", {"label": label}
            )
        if not re.match(ALPHANUMERIC, value):
            raise PydanticCustomError(
                "alphanumeric",
                "{label} has non-alphanumeric characters.",
                {"label": label},
            )
        return value

    @field_validator("date_of_birth", "date_of_death", mode="wrap")
    @classmethod
    def readable_date(
        cls, value, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> date | None:
        try:
            return handler(value)
        except (ValidationError, ValueError):
            raise PydanticCustomError(
                "date", "Invalid {what}", {"what": info.field_name.replace("_", " ")}
            ) from None


class AuthorRead(AuthorBase):
    date_of_birth: date | None = None
    date_of_death: date | None = None

    @computed_field
    @property
    def lifespan(self) -> str:
        born = format_date(self.date_of_birth)
        died = format_date(self.date_of_death)
        if not born and not died:
            return ""
        return f"{born} - {died}".strip()
