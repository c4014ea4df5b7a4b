from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from helpers import entity_url, list_url

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["entity_url"] = entity_url
templates.env.globals["list_url"] = list_url


def render(request: Request, name: str, status_code: int = 200, **context: Any):
    return templates.TemplateResponse(
        request, f"{name}.html", context, status_code=status_code
    )
