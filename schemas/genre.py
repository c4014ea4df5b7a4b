from pydantic import field_validator
from pydantic_core import PydanticCustomError

from .shared import FormModel, FormText, GenreBase


class GenreCreate(FormModel):
    name: FormText = ""

    @field_validator("name")
    @classmethod
    def name_given(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "Genre name required")
        return value


class GenreRead(GenreBase):
    pass


class GenreOption(GenreBase):
    """A genre offered in the book form's checkbox list."""

    checked: bool = False
