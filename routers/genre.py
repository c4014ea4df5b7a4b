from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.datastructures import FormData

from database import get_sessionmaker
from dependencies import body_id, form_data
from helpers import list_url, parallel
from logging_setup import get_logger
from models import Genre
from repository import books, genres
from schemas.genre import GenreCreate
from templating import render
from validation import form_errors, form_values

router = APIRouter(prefix="/catalog", tags=["genres"])
logger = get_logger("routers.genre")


def _fetch_with_books(sessions: async_sessionmaker, genre_id: int):
    return parallel(
        sessions,
        genre=lambda db: genres.find_by_id(db, genre_id),
        genre_books=lambda db: books.by_genre(db, genre_id),
    )


@router.get("/genres", response_class=HTMLResponse)
async def genre_list(
    request: Request,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        genre_list = await genres.find_many(db, order_by=[Genre.name.asc()])
    return render(request, "genre_list", title="Genre List", genre_list=genre_list)


@router.get("/genre/create", response_class=HTMLResponse)
async def genre_create_get(request: Request):
    return render(request, "genre_form", title="Create Genre")


@router.post("/genre/create", response_class=HTMLResponse)
async def genre_create_post(
    request: Request,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    try:
        record = GenreCreate.model_validate(form_values(form))
    except ValidationError as exc:
        return render(
            request,
            "genre_form",
            title="Create Genre",
            genre=form_values(form),
            errors=form_errors(exc),
        )

    async with sessions() as db:
        found = await genres.find_one(db, Genre.name == record.name)
        if found is not None:
            return RedirectResponse(found.url, status_code=status.HTTP_302_FOUND)
        genre = await genres.save(db, record)
    logger.info("Created genre %s", genre.id)
    return RedirectResponse(genre.url, status_code=status.HTTP_302_FOUND)


@router.get("/genre/{genre_id}", response_class=HTMLResponse)
async def genre_detail(
    request: Request,
    genre_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await _fetch_with_books(sessions, genre_id)
    if results["genre"] is None:
        raise HTTPException(status_code=404, detail="Genre not found")
    return render(
        request,
        "genre_detail",
        title="Genre Detail",
        genre=results["genre"],
        genre_books=results["genre_books"],
    )


@router.get("/genre/{genre_id}/delete", response_class=HTMLResponse)
async def genre_delete_get(
    request: Request,
    genre_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await _fetch_with_books(sessions, genre_id)
    if results["genre"] is None:
        return RedirectResponse(list_url("genre"), status_code=status.HTTP_302_FOUND)
    return render(
        request,
        "genre_delete",
        title="Delete Genre",
        genre=results["genre"],
        genre_books=results["genre_books"],
    )


@router.post("/genre/{genre_id}/delete", response_class=HTMLResponse)
async def genre_delete_post(
    request: Request,
    genre_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    target_id = body_id(form, "genreid")
    if target_id is None:
        return RedirectResponse(list_url("genre"), status_code=status.HTTP_302_FOUND)

    results = await _fetch_with_books(sessions, target_id)
    if results["genre_books"]:
        logger.info(
            "Refused to delete genre %s: %d book(s) remain",
            target_id,
            len(results["genre_books"]),
        )
        return render(
            request,
            "genre_delete",
            title="Delete Genre",
            genre=results["genre"],
            genre_books=results["genre_books"],
        )

    async with sessions() as db:
        if await genres.delete_by_id(db, target_id):
            logger.info("Deleted genre %s", target_id)
    return RedirectResponse(list_url("genre"), status_code=status.HTTP_302_FOUND)


@router.get("/genre/{genre_id}/update", response_class=HTMLResponse)
async def genre_update_get(
    request: Request,
    genre_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        genre = await genres.find_by_id(db, genre_id)
    if genre is None:
        raise HTTPException(status_code=404, detail="Genre not found")
    return render(request, "genre_form", title="Update Genre", genre=genre)


@router.post("/genre/{genre_id}/update", response_class=HTMLResponse)
async def genre_update_post(
    request: Request,
    genre_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    try:
        record = GenreCreate.model_validate(form_values(form))
    except ValidationError as exc:
        return render(
            request,
            "genre_form",
            title="Update Genre",
            genre={**form_values(form), "id": genre_id},
            errors=form_errors(exc),
        )

    # no duplicate-name lookup here, unlike create
    async with sessions() as db:
        genre = await genres.update_by_id(db, genre_id, record)
    if genre is None:
        raise HTTPException(status_code=404, detail="Genre not found")
    logger.info("Updated genre %s", genre_id)
    return RedirectResponse(genre.url, status_code=status.HTTP_302_FOUND)
