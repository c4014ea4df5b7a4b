import pytest

from factories import create_author, create_book, create_genre
from models import Genre
from repository import genres


@pytest.mark.asyncio
async def test_create_genre_and_view_detail(client, sessions):
    genre_id = await create_genre(client, name="  Poetry ")

    async with sessions() as db:
        genre = await genres.find_by_id(db, genre_id)
    assert genre.name == "Poetry"

    resp = await client.get(f"/catalog/genre/{genre_id}")
    assert resp.status_code == 200
    assert "Genre: Poetry" in resp.text
    assert "This genre has no books." in resp.text


@pytest.mark.asyncio
async def test_create_genre_escapes_html(client, sessions):
    genre_id = await create_genre(client, name="<b>Horror</b>")

    async with sessions() as db:
        genre = await genres.find_by_id(db, genre_id)
    assert genre.name == "&lt;b&gt;Horror&lt;/b&gt;"


@pytest.mark.asyncio
async def test_duplicate_genre_name_redirects_to_existing(client, sessions):
    genre_id = await create_genre(client, name="Fantasy")

    resp = await client.post("/catalog/genre/create", data={"name": "Fantasy"})
    assert resp.status_code == 302
    assert resp.headers["location"] == f"/catalog/genre/{genre_id}"

    # matching is case-sensitive
    other_id = await create_genre(client, name="fantasy")
    assert other_id != genre_id

    async with sessions() as db:
        assert await genres.count(db) == 2
        assert await genres.count(db, Genre.name == "Fantasy") == 1


@pytest.mark.asyncio
async def test_create_genre_with_empty_name(client, sessions):
    resp = await client.post("/catalog/genre/create", data={"name": "   "})
    assert resp.status_code == 200
    assert "Genre name required" in resp.text
    async with sessions() as db:
        assert await genres.count(db) == 0


@pytest.mark.asyncio
async def test_genre_list_sorted_by_name(client):
    for name in ("Poetry", "Fantasy", "Mystery"):
        await create_genre(client, name=name)

    resp = await client.get("/catalog/genres")
    body = resp.text
    assert body.index("Fantasy") < body.index("Mystery") < body.index("Poetry")


@pytest.mark.asyncio
async def test_update_genre_skips_duplicate_check(client, sessions):
    fantasy_id = await create_genre(client, name="Fantasy")
    poetry_id = await create_genre(client, name="Poetry")

    resp = await client.post(f"/catalog/genre/{poetry_id}/update", data={"name": "Fantasy"})
    assert resp.status_code == 302
    assert resp.headers["location"] == f"/catalog/genre/{poetry_id}"

    async with sessions() as db:
        assert await genres.count(db) == 2
        assert await genres.count(db, Genre.name == "Fantasy") == 2
        assert (await genres.find_by_id(db, fantasy_id)).name == "Fantasy"


@pytest.mark.asyncio
async def test_genre_detail_lists_books(client):
    genre_id = await create_genre(client, name="Romance")
    author_id = await create_author(client)
    await create_book(client, author_id, title="Emma", genre_ids=[genre_id])

    resp = await client.get(f"/catalog/genre/{genre_id}")
    assert "Emma" in resp.text


@pytest.mark.asyncio
async def test_delete_genre_guarded_by_books(client, sessions):
    genre_id = await create_genre(client, name="Romance")
    author_id = await create_author(client)
    await create_book(client, author_id, title="Emma", genre_ids=[genre_id])

    resp = await client.post(f"/catalog/genre/{genre_id}/delete", data={"genreid": str(genre_id)})
    assert resp.status_code == 200
    assert "Delete the following books" in resp.text
    async with sessions() as db:
        assert await genres.count(db) == 1


@pytest.mark.asyncio
async def test_delete_genre_without_books(client, sessions):
    genre_id = await create_genre(client, name="Romance")

    resp = await client.post(f"/catalog/genre/{genre_id}/delete", data={"genreid": str(genre_id)})
    assert resp.status_code == 302
    assert resp.headers["location"] == "/catalog/genres"
    async with sessions() as db:
        assert await genres.count(db) == 0


@pytest.mark.asyncio
async def test_delete_genre_without_body_id_deletes_nothing(client, sessions):
    genre_id = await create_genre(client, name="Romance")

    resp = await client.post(f"/catalog/genre/{genre_id}/delete", data={})
    assert resp.status_code == 302
    assert resp.headers["location"] == "/catalog/genres"
    async with sessions() as db:
        assert await genres.count(db) == 1


@pytest.mark.asyncio
async def test_genre_detail_missing_is_404(client):
    resp = await client.get("/catalog/genre/77")
    assert resp.status_code == 404
    assert "Genre not found" in resp.text
