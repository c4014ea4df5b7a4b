import re
from datetime import date
from typing import Annotated, Any, Optional

from markupsafe import escape
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    StringConstraints,
    computed_field,
)

from helpers import entity_url

ALPHANUMERIC = r"^[A-Za-z0-9]+$"

_REDUCED_DATE = re.compile(r"(\d{4})(?:-(\d{1,2}))?")


def escape_html(value: str) -> str:
    return str(escape(value))


def form_date(value: Any) -> Any:
    """Blank means no date; ``YYYY`` and ``YYYY-MM`` mean the first day of that period."""
    if not isinstance(value, str):
        return value
    value = value.strip()
    if not value:
        return None
    reduced = _REDUCED_DATE.fullmatch(value)
    if reduced:
        year, month = reduced.groups()
        return date(int(year), int(month or 1), 1)
    # a full timestamp keeps only its calendar day
    return value.partition("T")[0]


# trimmed, HTML-escaped form text
FormText = Annotated[str, StringConstraints(strip_whitespace=True), AfterValidator(escape_html)]
FormDate = Annotated[Optional[date], BeforeValidator(form_date)]


class FormModel(BaseModel):
    """A record built from a submitted HTML form.

    Absent fields fall back to their defaults and still run through the
    field validators, so a missing input reports the same message as an
    empty one.
    """

    class Config:
        validate_default = True
        populate_by_name = True


class AuthorBase(BaseModel):
    id: int
    first_name: str
    family_name: str

    @computed_field
    @property
    def name(self) -> str:
        if not self.first_name or not self.family_name:
            return ""
        return f"{self.family_name}, {self.first_name}"

    @computed_field
    @property
    def url(self) -> str:
        return entity_url("author", self.id)

    class Config:
        from_attributes = True


class GenreBase(BaseModel):
    id: int
    name: str

    @computed_field
    @property
    def url(self) -> str:
        return entity_url("genre", self.id)

    class Config:
        from_attributes = True


class BookBase(BaseModel):
    id: int
    title: str

    @computed_field
    @property
    def url(self) -> str:
        return entity_url("book", self.id)

    class Config:
        from_attributes = True
