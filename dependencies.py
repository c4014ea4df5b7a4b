from fastapi import Request
from starlette.datastructures import FormData


async def form_data(request: Request) -> FormData:
    return await request.form()


def body_id(form: FormData, field: str) -> int | None:
    """Parse the hidden id field a delete-confirmation form posts back."""
    raw = form.get(field)
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None
