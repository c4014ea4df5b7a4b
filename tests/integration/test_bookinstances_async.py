from datetime import date

import pytest

from factories import create_author, create_book, create_copy
from repository import book_instances


@pytest.fixture
def book_id_factory(client):
    async def make(title="Emma"):
        author_id = await create_author(client)
        return await create_book(client, author_id, title=title)

    return make


@pytest.mark.asyncio
async def test_empty_due_back_defaults_to_today_and_maintenance(client, sessions, book_id_factory):
    book_id = await book_id_factory()

    copy_id = await create_copy(client, book_id, due_back="")

    async with sessions() as db:
        copy = await book_instances.find_by_id(db, copy_id)
    assert copy.status == "Maintenance"
    assert copy.due_back == date.today()
    assert copy.book.title == "Emma"

    resp = await client.get(f"/catalog/bookinstance/{copy_id}")
    assert resp.status_code == 200
    assert "Copy: Emma" in resp.text
    assert "Maintenance" in resp.text


@pytest.mark.asyncio
async def test_create_copy_with_status_and_date(client, sessions, book_id_factory):
    book_id = await book_id_factory()

    copy_id = await create_copy(
        client, book_id, status="Loaned", due_back="2030-05-01", imprint=" Penguin "
    )

    async with sessions() as db:
        copy = await book_instances.find_by_id(db, copy_id)
    assert copy.status == "Loaned"
    assert copy.due_back == date(2030, 5, 1)
    assert copy.imprint == "Penguin"
    assert copy.due_back_formatted == "May 1, 2030"


@pytest.mark.asyncio
async def test_create_copy_validation_errors(client, sessions, book_id_factory):
    book_id = await book_id_factory()

    resp = await client.post(
        "/catalog/bookinstance/create",
        data={"book": str(book_id), "imprint": "", "status": "Lost", "due_back": "soon"},
    )

    assert resp.status_code == 200
    assert "Imprint must be specified" in resp.text
    assert "Invalid status" in resp.text
    assert "Invalid date" in resp.text
    assert f'<option value="{book_id}" selected>' in resp.text
    async with sessions() as db:
        assert await book_instances.count(db) == 0


@pytest.mark.asyncio
async def test_create_copy_requires_book(client, sessions):
    resp = await client.post(
        "/catalog/bookinstance/create", data={"book": "", "imprint": "Penguin"}
    )
    assert resp.status_code == 200
    assert "Book must be specified" in resp.text
    async with sessions() as db:
        assert await book_instances.count(db) == 0


@pytest.mark.asyncio
async def test_list_copies(client, book_id_factory):
    book_id = await book_id_factory(title="Persuasion")
    await create_copy(client, book_id, status="Available")
    await create_copy(client, book_id, imprint="Vintage, 1990", status="Reserved", due_back="2031-01-02")

    resp = await client.get("/catalog/bookinstances")
    assert resp.status_code == 200
    assert "Persuasion : Penguin, 2003" in resp.text
    assert "Persuasion : Vintage, 1990" in resp.text
    assert "(Due: Jan 2, 2031)" in resp.text


@pytest.mark.asyncio
async def test_update_copy_keeps_id(client, sessions, book_id_factory):
    book_id = await book_id_factory()
    other_book_id = await book_id_factory(title="Persuasion")
    copy_id = await create_copy(client, book_id)

    resp = await client.get(f"/catalog/bookinstance/{copy_id}/update")
    assert resp.status_code == 200
    assert f'<option value="{book_id}" selected>' in resp.text
    assert '<option value="Maintenance" selected>' in resp.text

    resp = await client.post(
        f"/catalog/bookinstance/{copy_id}/update",
        data={"book": str(other_book_id), "imprint": "Vintage", "status": "Available"},
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == f"/catalog/bookinstance/{copy_id}"

    async with sessions() as db:
        assert await book_instances.count(db) == 1
        copy = await book_instances.find_by_id(db, copy_id)
    assert copy.book_id == other_book_id
    assert copy.imprint == "Vintage"
    assert copy.status == "Available"


@pytest.mark.asyncio
async def test_delete_copy(client, sessions, book_id_factory):
    book_id = await book_id_factory()
    copy_id = await create_copy(client, book_id)

    resp = await client.get(f"/catalog/bookinstance/{copy_id}/delete")
    assert resp.status_code == 200
    assert "Do you really want to delete this BookInstance?" in resp.text

    resp = await client.post(
        f"/catalog/bookinstance/{copy_id}/delete", data={"bookinstanceid": str(copy_id)}
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == "/catalog/bookinstances"
    async with sessions() as db:
        assert await book_instances.count(db) == 0


@pytest.mark.asyncio
async def test_copy_missing(client):
    resp = await client.get("/catalog/bookinstance/9")
    assert resp.status_code == 404
    assert "Book copy not found" in resp.text

    resp = await client.get("/catalog/bookinstance/9/delete")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/catalog/bookinstances"
