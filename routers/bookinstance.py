from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker
from starlette.datastructures import FormData

from database import get_sessionmaker
from dependencies import body_id, form_data
from helpers import list_url, parallel
from logging_setup import get_logger
from models import BookInstanceStatus
from repository import book_instances, books
from schemas.bookinstance import BookInstanceCreate
from templating import render
from validation import form_errors, form_values

router = APIRouter(prefix="/catalog", tags=["bookinstances"])
logger = get_logger("routers.bookinstance")

STATUSES = [s.value for s in BookInstanceStatus]


async def _render_invalid(
    request: Request,
    sessions: async_sessionmaker,
    title: str,
    values: dict,
    errors: list,
    instance_id: int | None = None,
):
    async with sessions() as db:
        book_list = await books.titles(db)
    return render(
        request,
        "bookinstance_form",
        title=title,
        book_list=book_list,
        selected_book=values.get("book"),
        bookinstance={**values, "id": instance_id},
        statuses=STATUSES,
        errors=errors,
    )


@router.get("/bookinstances", response_class=HTMLResponse)
async def bookinstance_list(
    request: Request,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        bookinstance_list = await book_instances.find_many(db)
    return render(
        request,
        "bookinstance_list",
        title="Book Instance List",
        bookinstance_list=bookinstance_list,
    )


@router.get("/bookinstance/create", response_class=HTMLResponse)
async def bookinstance_create_get(
    request: Request,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        book_list = await books.titles(db)
    return render(
        request,
        "bookinstance_form",
        title="Create BookInstance",
        book_list=book_list,
        statuses=STATUSES,
    )


@router.post("/bookinstance/create", response_class=HTMLResponse)
async def bookinstance_create_post(
    request: Request,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    values = form_values(form)
    try:
        record = BookInstanceCreate.model_validate(values)
    except ValidationError as exc:
        return await _render_invalid(
            request, sessions, "Create BookInstance", values, form_errors(exc)
        )

    async with sessions() as db:
        bookinstance = await book_instances.save(db, record)
    logger.info("Created book instance %s", bookinstance.id)
    return RedirectResponse(bookinstance.url, status_code=status.HTTP_302_FOUND)


@router.get("/bookinstance/{bookinstance_id}", response_class=HTMLResponse)
async def bookinstance_detail(
    request: Request,
    bookinstance_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        bookinstance = await book_instances.find_by_id(db, bookinstance_id)
    if bookinstance is None:
        raise HTTPException(status_code=404, detail="Book copy not found")
    book_title = bookinstance.book.title if bookinstance.book else ""
    return render(
        request,
        "bookinstance_detail",
        title=f"Copy: {book_title}",
        bookinstance=bookinstance,
    )


@router.get("/bookinstance/{bookinstance_id}/delete", response_class=HTMLResponse)
async def bookinstance_delete_get(
    request: Request,
    bookinstance_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    async with sessions() as db:
        bookinstance = await book_instances.find_by_id(db, bookinstance_id)
    if bookinstance is None:
        return RedirectResponse(
            list_url("bookinstance"), status_code=status.HTTP_302_FOUND
        )
    return render(
        request,
        "bookinstance_delete",
        title="Delete BookInstance",
        bookinstance=bookinstance,
    )


@router.post("/bookinstance/{bookinstance_id}/delete", response_class=HTMLResponse)
async def bookinstance_delete_post(
    request: Request,
    bookinstance_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    # copies have no dependents, so there is no guard to re-check
    target_id = body_id(form, "bookinstanceid")
    if target_id is not None:
        async with sessions() as db:
            if await book_instances.delete_by_id(db, target_id):
                logger.info("Deleted book instance %s", target_id)
    return RedirectResponse(list_url("bookinstance"), status_code=status.HTTP_302_FOUND)


@router.get("/bookinstance/{bookinstance_id}/update", response_class=HTMLResponse)
async def bookinstance_update_get(
    request: Request,
    bookinstance_id: int,
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    results = await parallel(
        sessions,
        bookinstance=lambda db: book_instances.find_by_id(db, bookinstance_id),
        book_list=books.titles,
    )
    bookinstance = results["bookinstance"]
    if bookinstance is None:
        raise HTTPException(status_code=404, detail="Book copy not found")
    return render(
        request,
        "bookinstance_form",
        title="Update BookInstance",
        book_list=results["book_list"],
        selected_book=bookinstance.book_id,
        bookinstance=bookinstance,
        statuses=STATUSES,
    )


@router.post("/bookinstance/{bookinstance_id}/update", response_class=HTMLResponse)
async def bookinstance_update_post(
    request: Request,
    bookinstance_id: int,
    form: FormData = Depends(form_data),
    sessions: async_sessionmaker = Depends(get_sessionmaker),
):
    values = form_values(form)
    try:
        record = BookInstanceCreate.model_validate(values)
    except ValidationError as exc:
        return await _render_invalid(
            request,
            sessions,
            "Update BookInstance",
            values,
            form_errors(exc),
            bookinstance_id,
        )

    async with sessions() as db:
        bookinstance = await book_instances.update_by_id(db, bookinstance_id, record)
    if bookinstance is None:
        raise HTTPException(status_code=404, detail="Book copy not found")
    logger.info("Updated book instance %s", bookinstance_id)
    return RedirectResponse(bookinstance.url, status_code=status.HTTP_302_FOUND)
