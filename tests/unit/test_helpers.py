import asyncio
from datetime import date

import pytest

from helpers import entity_url, format_date, list_url, parallel
from schemas.author import AuthorRead
from schemas.bookinstance import BookInstanceRead


class FakeSessions:
    """Stands in for an async_sessionmaker; counts the sessions it hands out."""

    def __init__(self):
        self.opened = 0
        self.closed = 0

    def __call__(self):
        return self

    async def __aenter__(self):
        self.opened += 1
        return f"session-{self.opened}"

    async def __aexit__(self, *exc):
        self.closed += 1
        return False


def test_urls():
    assert entity_url("author", 3) == "/catalog/author/3"
    assert list_url("bookinstance") == "/catalog/bookinstances"


def test_format_date():
    assert format_date(date(2026, 10, 9)) == "Oct 9, 2026"
    assert format_date(None) == ""


@pytest.mark.asyncio
async def test_parallel_runs_fetches_concurrently():
    sessions = FakeSessions()
    first_started = asyncio.Event()
    second_started = asyncio.Event()

    async def first(db):
        first_started.set()
        await second_started.wait()
        return "a"

    async def second(db):
        second_started.set()
        await first_started.wait()
        return "b"

    # run one after the other, these two would wait on each other forever
    results = await asyncio.wait_for(parallel(sessions, first=first, second=second), 1)

    assert results == {"first": "a", "second": "b"}
    assert sessions.opened == 2
    assert sessions.closed == 2


@pytest.mark.asyncio
async def test_parallel_propagates_failure():
    async def ok(db):
        return 1

    async def broken(db):
        raise RuntimeError("connection lost")

    with pytest.raises(RuntimeError, match="connection lost"):
        await parallel(FakeSessions(), ok=ok, broken=broken)


@pytest.mark.asyncio
async def test_parallel_cancels_other_fetches_on_failure():
    sessions = FakeSessions()
    cancelled = asyncio.Event()

    async def stuck(db):
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            cancelled.set()
            raise

    async def broken(db):
        await asyncio.sleep(0)
        raise RuntimeError("connection lost")

    with pytest.raises(RuntimeError, match="connection lost"):
        await asyncio.wait_for(parallel(sessions, stuck=stuck, broken=broken), 1)

    assert cancelled.is_set()
    assert sessions.opened == 2
    assert sessions.closed == 2


def test_author_display_fields():
    author = AuthorRead(
        id=1,
        first_name="Jane",
        family_name="Austen",
        date_of_birth=date(1775, 12, 16),
        date_of_death=date(1817, 7, 18),
    )
    assert author.name == "Austen, Jane"
    assert author.lifespan == "Dec 16, 1775 - Jul 18, 1817"
    assert author.url == "/catalog/author/1"

    nameless = AuthorRead(id=2, first_name="", family_name="Austen")
    assert nameless.name == ""
    assert nameless.lifespan == ""


def test_book_instance_display_fields():
    copy = BookInstanceRead(id=5, book_id=1, imprint="Penguin", due_back=date(2030, 5, 1))
    assert copy.status == "Maintenance"
    assert copy.due_back_formatted == "May 1, 2030"
    assert copy.url == "/catalog/bookinstance/5"
