import asyncio
from datetime import date
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

Fetch = Callable[[AsyncSession], Awaitable[Any]]

CATALOG_PREFIX = "/catalog"


def entity_url(kind: str, entity_id: int) -> str:
    return f"{CATALOG_PREFIX}/{kind}/{entity_id}"


def list_url(kind: str) -> str:
    return f"{CATALOG_PREFIX}/{kind}s"


def format_date(value: date | None) -> str:
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


async def parallel(sessions: async_sessionmaker, **fetches: Fetch) -> dict[str, Any]:
    """Run independent fetches concurrently and wait for all of them.

    Each fetch gets its own session, since an ``AsyncSession`` cannot be shared
    between concurrent tasks. Results come back keyed by the keyword they were
    passed under. The first exception raised propagates to the caller once the
    remaining fetches have been cancelled and their sessions closed.
    """

    async def run(fetch: Fetch) -> Any:
        async with sessions() as db:
            return await fetch(db)

    names = list(fetches)
    tasks = [asyncio.ensure_future(run(fetches[name])) for name in names]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return dict(zip(names, results))
