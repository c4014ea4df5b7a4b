from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import async_sessionmaker

from database import get_sessionmaker
from helpers import CATALOG_PREFIX, parallel
from models import BookInstance, BookInstanceStatus
from repository import authors, book_instances, books, genres
from templating import render

router = APIRouter(tags=["catalog"])


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(CATALOG_PREFIX, status_code=status.HTTP_302_FOUND)


@router.get(CATALOG_PREFIX, response_class=HTMLResponse)
async def index(
    request: Request,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    data = await parallel(
        sessions,
        book_count=books.count,
        book_instance_count=book_instances.count,
        book_instance_available_count=lambda db: book_instances.count(
            db, BookInstance.status == BookInstanceStatus.available
        ),
        author_count=authors.count,
        genre_count=genres.count,
    )
    return render(request, "index", title="Local Library Home", data=data)
