"""
Async seeding script to populate a running catalog with genres, authors,
books and copies by submitting the same HTML forms a user would.

Usage:
    python scripts/seed_async.py --authors 10 --books 20 --base-url http://localhost:8000

The app must be running and reachable at the provided base URL.
"""

import argparse
import asyncio
import os
import random
import uuid

import httpx

DEFAULT_BASE_URL = os.getenv("SEED_BASE_URL", "http://localhost:8000")

GENRES = ["Fantasy", "Science Fiction", "French Poetry", "Mystery", "History"]
STATUSES = ["Available", "Maintenance", "Loaned", "Reserved"]


def _isbn() -> str:
    # Generate a 13-digit ISBN-like string
    return f"978{uuid.uuid4().int % 10**10:010d}"


def _created_id(resp: httpx.Response) -> int:
    """The create forms answer with a redirect to /catalog/<entity>/<id>."""
    if resp.status_code != 302:
        raise RuntimeError(f"form rejected ({resp.status_code}): {resp.text[:200]}")
    return int(resp.headers["location"].rstrip("/").rsplit("/", 1)[-1])


async def create_genre(client: httpx.AsyncClient, name: str) -> int:
    resp = await client.post("/catalog/genre/create", data={"name": name})
    return _created_id(resp)


async def create_author(client: httpx.AsyncClient, first_name: str, family_name: str) -> int:
    resp = await client.post(
        "/catalog/author/create",
        data={
            "first_name": first_name,
            "family_name": family_name,
            "date_of_birth": f"{random.randint(1800, 1990)}-01-01",
        },
    )
    return _created_id(resp)


async def create_book(
    client: httpx.AsyncClient, title: str, author_id: int, genre_ids: list[int]
) -> int:
    payload = {
        "title": title,
        "author": str(author_id),
        "summary": "seeded via scripts/seed_async.py",
        "isbn": _isbn(),
        "genre": [str(g) for g in genre_ids],
    }
    resp = await client.post("/catalog/book/create", data=payload)
    return _created_id(resp)


async def create_copy(client: httpx.AsyncClient, book_id: int) -> int:
    payload = {
        "book": str(book_id),
        "imprint": "Seed Press, 2024",
        "status": random.choice(STATUSES),
        "due_back": "",
    }
    resp = await client.post("/catalog/bookinstance/create", data=payload)
    return _created_id(resp)


async def seed(base_url: str, authors: int, books: int, copies_per_book: int):
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        genre_ids = [await create_genre(client, name) for name in GENRES]

        author_ids: list[int] = []
        for idx in range(authors):
            suffix = uuid.uuid4().hex[:6]
            author_ids.append(
                await create_author(client, first_name=f"Seed{idx}", family_name=f"Author{suffix}")
            )

        if not author_ids:
            print("No authors created; skipping book creation.")
            return

        created_books: list[int] = []
        created_copies = 0
        for idx in range(books):
            suffix = uuid.uuid4().hex[:6]
            book_id = await create_book(
                client,
                title=f"Seed Book {idx}-{suffix}",
                author_id=random.choice(author_ids),
                genre_ids=random.sample(genre_ids, k=random.randint(0, 2)),
            )
            created_books.append(book_id)
            for _ in range(copies_per_book):
                await create_copy(client, book_id)
                created_copies += 1

    print(
        f"Seeded {len(genre_ids)} genres, {len(author_ids)} authors, "
        f"{len(created_books)} books and {created_copies} copies to {base_url}"
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Async seeder for the Local Library catalog")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="App base URL")
    parser.add_argument("--authors", type=int, default=10, help="Number of authors to create")
    parser.add_argument("--books", type=int, default=20, help="Number of books to create")
    parser.add_argument(
        "--copies-per-book",
        type=int,
        default=2,
        help="Number of copies to create for each book",
    )
    return parser.parse_args()


def main():
    args = parse_args()
    asyncio.run(
        seed(
            base_url=args.base_url,
            authors=args.authors,
            books=args.books,
            copies_per_book=args.copies_per_book,
        )
    )


if __name__ == "__main__":
    main()
