from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import CREATE_TABLES, create_tables
from logging_setup import configure_logging, get_logger
from routers import author, book, bookinstance, catalog, genre
from templating import render

configure_logging()
logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if CREATE_TABLES:
        await create_tables()
    yield


app = FastAPI(title="Local Library", lifespan=lifespan)

app.include_router(catalog.router)
app.include_router(author.router)
app.include_router(book.router)
app.include_router(genre.router)
app.include_router(bookinstance.router)


@app.exception_handler(StarletteHTTPException)
async def http_error_page(request: Request, exc: StarletteHTTPException):
    return render(
        request,
        "error",
        status_code=exc.status_code,
        title="Error",
        message=exc.detail,
        status=exc.status_code,
    )


@app.exception_handler(RequestValidationError)
async def malformed_path_page(request: Request, exc: RequestValidationError):
    # route params are ids; one that does not parse names no entity
    return render(
        request, "error", status_code=404, title="Error", message="Not Found", status=404
    )


@app.exception_handler(Exception)
async def server_error_page(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return render(
        request,
        "error",
        status_code=500,
        title="Error",
        message="Internal Server Error",
        status=500,
    )
