from typing import Iterable

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.datastructures import FormData

from database import get_sessionmaker
from dependencies import body_id, form_data
from helpers import list_url, parallel
from logging_setup import get_logger
from models import Author, Genre
from repository import authors, book_instances, books, genres
from schemas.book import BookCreate
from schemas.genre import GenreOption, GenreRead
from templating import render
from validation import form_errors, form_values

router = APIRouter(prefix="/catalog", tags=["books"])
logger = get_logger("routers.book")


def mark_checked(genre_list: Iterable[GenreRead], selected: Iterable) -> list[GenreOption]:
    # selected ids arrive as ints from the store or as strings from a form
    selected_ids = {str(s) for s in selected}
    return [
        GenreOption(id=g.id, name=g.name, checked=str(g.id) in selected_ids)
        for g in genre_list
    ]


def _choices(**extra):
    return dict(
        authors=lambda db: authors.find_many(db, order_by=[Author.family_name.asc()]),
        genres=lambda db: genres.find_many(db, order_by=[Genre.name.asc()]),
        **extra,
    )


def _fetch_with_instances(sessions: async_sessionmaker, book_id: int):
    return parallel(
        sessions,
        book=lambda db: books.find_by_id(db, book_id),
        book_instances=lambda db: book_instances.by_book(db, book_id),
    )


async def _render_invalid(
    request: Request,
    sessions: async_sessionmaker,
    title: str,
    values: dict,
    errors: list,
    book_id: int | None = None,
):
    results = await parallel(sessions, **_choices())
    book = {**values, "id": book_id}
    return render(
        request,
        "book_form",
        title=title,
        authors=results["authors"],
        genres=mark_checked(results["genres"], values["genre"]),
        book=book,
        selected_author=values.get("author"),
        errors=errors,
    )


@router.get("/books", response_class=HTMLResponse)
async def book_list(
    request: Request,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        book_list = await books.list_with_authors(db)
    return render(request, "book_list", title="Book List", book_list=book_list)


@router.get("/book/create", response_class=HTMLResponse)
async def book_create_get(
    request: Request,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await parallel(sessions, **_choices())
    return render(
        request,
        "book_form",
        title="Create Book",
        authors=results["authors"],
        genres=mark_checked(results["genres"], []),
    )


@router.post("/book/create", response_class=HTMLResponse)
async def book_create_post(
    request: Request,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    values = form_values(form, "genre")
    try:
        record = BookCreate.model_validate(values)
    except ValidationError as exc:
        return await _render_invalid(
            request, sessions, "Create Book", values, form_errors(exc)
        )

    async with sessions() as db:
        book = await books.save(db, record)
    logger.info("Created book %s", book.id)
    return RedirectResponse(book.url, status_code=status.HTTP_302_FOUND)


@router.get("/book/{book_id}", response_class=HTMLResponse)
async def book_detail(
    request: Request,
    book_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await _fetch_with_instances(sessions, book_id)
    book = results["book"]
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return render(
        request,
        "book_detail",
        title=book.title,
        book=book,
        book_instances=results["book_instances"],
    )


@router.get("/book/{book_id}/delete", response_class=HTMLResponse)
async def book_delete_get(
    request: Request,
    book_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await _fetch_with_instances(sessions, book_id)
    if results["book"] is None:
        return RedirectResponse(list_url("book"), status_code=status.HTTP_302_FOUND)
    return render(
        request,
        "book_delete",
        title="Delete Book",
        book=results["book"],
        book_instances=results["book_instances"],
    )


@router.post("/book/{book_id}/delete", response_class=HTMLResponse)
async def book_delete_post(
    request: Request,
    book_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    target_id = body_id(form, "bookid")
    if target_id is None:
        return RedirectResponse(list_url("book"), status_code=status.HTTP_302_FOUND)

    results = await _fetch_with_instances(sessions, target_id)
    if results["book_instances"]:
        logger.info(
            "Refused to delete book %s: %d copy(ies) remain",
            target_id,
            len(results["book_instances"]),
        )
        return render(
            request,
            "book_delete",
            title="Delete Book",
            book=results["book"],
            book_instances=results["book_instances"],
        )

    async with sessions() as db:
        if await books.delete_by_id(db, target_id):
            logger.info("Deleted book %s", target_id)
    return RedirectResponse(list_url("book"), status_code=status.HTTP_302_FOUND)


@router.get("/book/{book_id}/update", response_class=HTMLResponse)
async def book_update_get(
    request: Request,
    book_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await parallel(
        sessions, **_choices(book=lambda db: books.find_by_id(db, book_id))
    )
    book = results["book"]
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return render(
        request,
        "book_form",
        title="Update Book",
        authors=results["authors"],
        genres=mark_checked(results["genres"], book.genre_ids),
        book=book,
        selected_author=book.author_id,
    )


@router.post("/book/{book_id}/update", response_class=HTMLResponse)
async def book_update_post(
    request: Request,
    book_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    values = form_values(form, "genre")
    try:
        record = BookCreate.model_validate(values)
    except ValidationError as exc:
        return await _render_invalid(
            request, sessions, "Update Book", values, form_errors(exc), book_id
        )

    async with sessions() as db:
        book = await books.update_by_id(db, book_id, record)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    logger.info("Updated book %s", book_id)
    return RedirectResponse(book.url, status_code=status.HTTP_302_FOUND)
