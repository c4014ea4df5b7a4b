from typing import Any, List

from pydantic import (
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic_core import PydanticCustomError

from .shared import AuthorBase, BookBase, FormModel, FormText, GenreBase

REQUIRED_MESSAGES = {
    "title": "Title must not be empty.",
    "summary": "Summary must not be empty.",
    "isbn": "ISBN must not be empty",
}


class BookCreate(FormModel):
    title: FormText = ""
    author_id: int = Field(None, alias="author")
    summary: FormText = ""
    isbn: FormText = ""
    genre_ids: list[int] = Field(default_factory=list, alias="genre")

    @field_validator("title", "summary", "isbn")
    @classmethod
    def not_empty(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise PydanticCustomError("required", REQUIRED_MESSAGES[info.field_name])
        return value

    @field_validator("author_id", mode="wrap")
    @classmethod
    def author_reference(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> int:
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            raise PydanticCustomError("required", "Author must not be empty.")
        try:
            return handler(value)
        except ValidationError:
            raise PydanticCustomError("reference", "Author must be a valid id.") from None

    @field_validator("genre_ids", mode="wrap")
    @classmethod
    def genre_references(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> list[int]:
        if isinstance(value, (str, int)):
            value = [value]
        try:
            return handler(value)
        except ValidationError:
            raise PydanticCustomError("reference", "Genre must be a valid id.") from None


class BookListRead(BookBase):
    author: AuthorBase | None = None


class BookSummaryRead(BookBase):
    summary: str


class BookDetailRead(BookBase):
    author_id: int
    summary: str
    isbn: str
    author: AuthorBase | None = None
    genres: List[GenreBase] = Field(default_factory=list)

    @property
    def genre_ids(self) -> list[int]:
        return [g.id for g in self.genres]
