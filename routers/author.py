from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.datastructures import FormData

from database import get_sessionmaker
from dependencies import body_id, form_data
from helpers import list_url, parallel
from logging_setup import get_logger
from models import Author
from repository import authors, books
from schemas.author import AuthorCreate
from templating import render
from validation import form_errors, form_values

router = APIRouter(prefix="/catalog", tags=["authors"])
logger = get_logger("routers.author")


def _fetch_with_books(sessions: async_sessionmaker, author_id: int):
    return parallel(
        sessions,
        author=lambda db: authors.find_by_id(db, author_id),
        author_books=lambda db: books.by_author(db, author_id),
    )


@router.get("/authors", response_class=HTMLResponse)
async def author_list(
    request: Request,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        author_list = await authors.find_many(db, order_by=[Author.family_name.asc()])
    return render(request, "author_list", title="Author List", author_list=author_list)


@router.get("/author/create", response_class=HTMLResponse)
async def author_create_get(request: Request):
    return render(request, "author_form", title="Create Author")


@router.post("/author/create", response_class=HTMLResponse)
async def author_create_post(
    request: Request,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    try:
        record = AuthorCreate.model_validate(form_values(form))
    except ValidationError as exc:
        return render(
            request,
            "author_form",
            title="Create Author",
            author=form_values(form),
            errors=form_errors(exc),
        )

    async with sessions() as db:
        author = await authors.save(db, record)
    logger.info("Created author %s", author.id)
    return RedirectResponse(author.url, status_code=status.HTTP_302_FOUND)


@router.get("/author/{author_id}", response_class=HTMLResponse)
async def author_detail(
    request: Request,
    author_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await _fetch_with_books(sessions, author_id)
    if results["author"] is None:
        raise HTTPException(status_code=404, detail="Author not found")
    return render(
        request,
        "author_detail",
        title="Author Detail",
        author=results["author"],
        author_books=results["author_books"],
    )


@router.get("/author/{author_id}/delete", response_class=HTMLResponse)
async def author_delete_get(
    request: Request,
    author_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await _fetch_with_books(sessions, author_id)
    if results["author"] is None:
        return RedirectResponse(list_url("author"), status_code=status.HTTP_302_FOUND)
    return render(
        request,
        "author_delete",
        title="Delete Author",
        author=results["author"],
        author_books=results["author_books"],
    )


@router.post("/author/{author_id}/delete", response_class=HTMLResponse)
async def author_delete_post(
    request: Request,
    author_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    # the id to delete comes from the confirmation form body
    target_id = body_id(form, "authorid")
    if target_id is None:
        return RedirectResponse(list_url("author"), status_code=status.HTTP_302_FOUND)

    results = await _fetch_with_books(sessions, target_id)
    if results["author_books"]:
        logger.info(
            "Refused to delete author %s: %d book(s) remain",
            target_id,
            len(results["author_books"]),
        )
        return render(
            request,
            "author_delete",
            title="Delete Author",
            author=results["author"],
            author_books=results["author_books"],
        )

    async with sessions() as db:
        if await authors.delete_by_id(db, target_id):
            logger.info("Deleted author %s", target_id)
    return RedirectResponse(list_url("author"), status_code=status.HTTP_302_FOUND)


@router.get("/author/{author_id}/update", response_class=HTMLResponse)
async def author_update_get(
    request: Request,
    author_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        author = await authors.find_by_id(db, author_id)
    if author is None:
        raise HTTPException(status_code=404, detail="Author not found")
    return render(request, "author_form", title="Update Author", author=author)


@router.post("/author/{author_id}/update", response_class=HTMLResponse)
async def author_update_post(
    request: Request,
    author_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    try:
        record = AuthorCreate.model_validate(form_values(form))
    except ValidationError as exc:
        return render(
            request,
            "author_form",
            title="Update Author",
            author={**form_values(form), "id": author_id},
            errors=form_errors(exc),
        )

    async with sessions() as db:
        author = await authors.update_by_id(db, author_id, record)
    if author is None:
        raise HTTPException(status_code=404, detail="Author not found")
    logger.info("Updated author %s", author_id)
    return RedirectResponse(author.url, status_code=status.HTTP_302_FOUND)
