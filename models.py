import enum
from datetime import date
from typing import Optional

from sqlalchemy import Date, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base


class BookInstanceStatus(str, enum.Enum):
    available = "Available"
    maintenance = "Maintenance"
    loaned = "Loaned"
    reserved = "Reserved"


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(), nullable=False)
    family_name: Mapped[str] = mapped_column(String(), nullable=False, index=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    date_of_death: Mapped[date | None] = mapped_column(Date)


class Genre(Base):
    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    # unique by convention only; create-POST looks the name up first
    name: Mapped[str] = mapped_column(String(), nullable=False, index=True)


class BookGenre(Base):
    __tablename__ = "book_genre_relation"

    id: Mapped[int] = mapped_column(primary_key=True)
    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    genre_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    genre: Mapped[Optional["Genre"]] = relationship(
        "Genre",
        primaryjoin="foreign(BookGenre.genre_id) == Genre.id",
        viewonly=True,
    )


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(), nullable=False, index=True)
    # references are plain ids: a dangling author renders as missing
    author_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    isbn: Mapped[str] = mapped_column(String(), nullable=False)

    author: Mapped[Optional["Author"]] = relationship(
        "Author",
        primaryjoin="foreign(Book.author_id) == Author.id",
        viewonly=True,
    )
    genre_links: Mapped[list["BookGenre"]] = relationship(
        "BookGenre",
        order_by=BookGenre.position,
        cascade="all, delete-orphan",
    )

    @property
    def genres(self) -> list["Genre"]:
        return [link.genre for link in self.genre_links if link.genre is not None]

    def set_genres(self, genre_ids: list[int]) -> None:
        seen: set[int] = set()
        links = []
        for gid in genre_ids:
            if gid in seen:
                continue
            seen.add(gid)
            links.append(BookGenre(genre_id=gid, position=len(links)))
        self.genre_links = links


class BookInstance(Base):
    __tablename__ = "book_instances"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    book_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    imprint: Mapped[str] = mapped_column(String(), nullable=False)
    status: Mapped[BookInstanceStatus] = mapped_column(
        Enum(
            BookInstanceStatus,
            name="book_instance_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=BookInstanceStatus.maintenance,
        index=True,
    )
    due_back: Mapped[date | None] = mapped_column(Date, default=date.today)

    book: Mapped[Optional["Book"]] = relationship(
        "Book",
        primaryjoin="foreign(BookInstance.book_id) == Book.id",
        viewonly=True,
    )
