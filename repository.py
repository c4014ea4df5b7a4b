"""
Datastore access for the catalog entities.

Repositories take the session to run in and hand back Pydantic read records,
so nothing returned to a route is bound to a session that has already closed.
"""

from typing import Any, Generic, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import load_only, selectinload

from models import Author, Book, BookGenre, BookInstance, Genre
from schemas.author import AuthorRead
from schemas.book import BookDetailRead, BookListRead, BookSummaryRead
from schemas.bookinstance import BookInstanceRead
from schemas.genre import GenreRead
from schemas.shared import BookBase

ModelT = TypeVar("ModelT")
ReadT = TypeVar("ReadT", bound=BaseModel)


class Repository(Generic[ModelT, ReadT]):
    def __init__(
        self,
        model: Type[ModelT],
        read_schema: Type[ReadT],
        options: Sequence[Any] = (),
    ) -> None:
        self.model = model
        self.read_schema = read_schema
        self.options = tuple(options)

    def _read(self, obj, schema: Type[BaseModel] | None = None):
        schema = schema or self.read_schema
        return schema.model_validate(obj, from_attributes=True)

    async def _get(self, db: AsyncSession, entity_id: int) -> ModelT | None:
        stmt = (
            select(self.model)
            .options(*self.options)
            .where(self.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return (await db.execute(stmt)).scalar_one_or_none()

    async def find_by_id(self, db: AsyncSession, entity_id: int) -> ReadT | None:
        obj = await self._get(db, entity_id)
        return self._read(obj) if obj is not None else None

    async def find_many(
        self,
        db: AsyncSession,
        *where,
        order_by: Sequence[Any] = (),
        options: Sequence[Any] | None = None,
        schema: Type[BaseModel] | None = None,
    ) -> list:
        stmt = select(self.model).options(
            *(self.options if options is None else options)
        )
        if where:
            stmt = stmt.where(*where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        objs = (await db.execute(stmt)).scalars().unique().all()
        return [self._read(obj, schema) for obj in objs]

    async def find_one(self, db: AsyncSession, *where) -> ReadT | None:
        stmt = select(self.model).options(*self.options).where(*where).limit(1)
        obj = (await db.execute(stmt)).scalars().first()
        return self._read(obj) if obj is not None else None

    async def count(self, db: AsyncSession, *where) -> int:
        stmt = select(func.count()).select_from(self.model)
        if where:
            stmt = stmt.where(*where)
        return int((await db.execute(stmt)).scalar_one())

    def _assign(self, obj: ModelT, record: BaseModel) -> None:
        for key, val in record.model_dump().items():
            setattr(obj, key, val)

    async def save(self, db: AsyncSession, record: BaseModel) -> ReadT:
        obj = self.model()
        self._assign(obj, record)
        db.add(obj)
        await db.commit()
        obj = await self._get(db, obj.id)
        return self._read(obj)

    async def update_by_id(
        self, db: AsyncSession, entity_id: int, record: BaseModel
    ) -> ReadT | None:
        obj = await self._get(db, entity_id)
        if obj is None:
            return None
        self._assign(obj, record)
        await db.commit()
        obj = await self._get(db, entity_id)
        return self._read(obj)

    async def delete_by_id(self, db: AsyncSession, entity_id: int) -> bool:
        obj = await self._get(db, entity_id)
        if obj is None:
            return False
        await db.delete(obj)
        await db.commit()
        return True


class BookRepository(Repository[Book, BookDetailRead]):
    def _assign(self, obj: Book, record: BaseModel) -> None:
        data = record.model_dump()
        genre_ids = data.pop("genre_ids", [])
        for key, val in data.items():
            setattr(obj, key, val)
        obj.set_genres(genre_ids)

    async def list_with_authors(self, db: AsyncSession) -> list[BookListRead]:
        return await self.find_many(
            db,
            order_by=[Book.title.asc()],
            options=[
                load_only(Book.id, Book.title, Book.author_id),
                selectinload(Book.author).load_only(
                    Author.id, Author.first_name, Author.family_name
                ),
            ],
            schema=BookListRead,
        )

    async def by_author(self, db: AsyncSession, author_id: int) -> list[BookSummaryRead]:
        return await self.find_many(
            db,
            Book.author_id == author_id,
            order_by=[Book.title.asc()],
            options=[load_only(Book.id, Book.title, Book.summary)],
            schema=BookSummaryRead,
        )

    async def by_genre(self, db: AsyncSession, genre_id: int) -> list[BookSummaryRead]:
        return await self.find_many(
            db,
            Book.genre_links.any(BookGenre.genre_id == genre_id),
            order_by=[Book.title.asc()],
            options=[load_only(Book.id, Book.title, Book.summary)],
            schema=BookSummaryRead,
        )

    async def titles(self, db: AsyncSession) -> list[BookBase]:
        return await self.find_many(
            db,
            order_by=[Book.title.asc()],
            options=[load_only(Book.id, Book.title)],
            schema=BookBase,
        )


class BookInstanceRepository(Repository[BookInstance, BookInstanceRead]):
    async def by_book(self, db: AsyncSession, book_id: int) -> list[BookInstanceRead]:
        return await self.find_many(
            db,
            BookInstance.book_id == book_id,
            order_by=[BookInstance.id.asc()],
        )


authors = Repository(Author, AuthorRead)
genres = Repository(Genre, GenreRead)
books = BookRepository(
    Book,
    BookDetailRead,
    options=[
        selectinload(Book.author),
        selectinload(Book.genre_links).selectinload(BookGenre.genre),
    ],
)
book_instances = BookInstanceRepository(
    BookInstance,
    BookInstanceRead,
    options=[selectinload(BookInstance.book).load_only(Book.id, Book.title)],
)
