"""
Glue between submitted HTML forms and the ``*Create`` schemas.

The schemas carry every field rule and message. A failed form is not an
error: the route catches the ``ValidationError``, flattens it with
``form_errors`` and re-renders the form with the messages in field order.
"""

from typing import Any, NamedTuple

from pydantic import ValidationError
from starlette.datastructures import FormData


class FieldError(NamedTuple):
    field: str
    msg: str


def _trimmed(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def form_values(form: FormData, *many: str) -> dict[str, Any]:
    """Flatten a submitted form with text trimmed; fields named in ``many`` keep every value."""
    values: dict[str, Any] = {key: _trimmed(form.get(key)) for key in form.keys()}
    values.update({key: [_trimmed(v) for v in form.getlist(key)] for key in many})
    return values


def form_errors(exc: ValidationError) -> list[FieldError]:
    return [
        FieldError(".".join(str(part) for part in err["loc"]), err["msg"])
        for err in exc.errors()
    ]
