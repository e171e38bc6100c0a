"""Integration tests running the app with its real sessions on a file database."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import bookshelf.main as main_module
from bookshelf.core import database
from bookshelf.main import app, lifespan
from bookshelf.models.book import Book
from bookshelf.repositories.books import BookRepository


@pytest.fixture
async def file_engine(tmp_path, monkeypatch):
    """Point the application's engine and session maker at a temporary SQLite file."""
    engine = database.build_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookshelf.db'}")
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(
        database,
        "async_session_maker",
        async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
    )
    yield engine
    await engine.dispose()


@pytest.fixture
def lifecycle_hooks(monkeypatch):
    """Record calls to init_db and close_db while still running them."""
    init = AsyncMock(wraps=database.init_db)
    close = AsyncMock(wraps=database.close_db)
    monkeypatch.setattr(main_module, "init_db", init)
    monkeypatch.setattr(main_module, "close_db", close)
    return init, close


@pytest.fixture
async def live_client(file_engine, lifecycle_hooks) -> AsyncGenerator[AsyncClient, None]:
    """Client for the app with startup/shutdown run and get_db left in place."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with lifespan(app):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


async def _stored_isbns(engine) -> list[str]:
    async with async_sessionmaker(engine)() as session:
        result = await session.execute(select(Book.isbn).order_by(Book.isbn))
        return list(result.scalars().all())


class TestLifespan:
    """Tests for application startup and shutdown."""

    async def test_lifespan_creates_tables_and_closes_engine(self, file_engine, lifecycle_hooks):
        """Test init_db runs on startup and close_db on shutdown."""
        init, close = lifecycle_hooks

        async with lifespan(app):
            init.assert_awaited_once()
            close.assert_not_awaited()
            async with file_engine.connect() as conn:
                tables = await conn.run_sync(lambda c: inspect(c).get_table_names())
            assert "books" in tables

        close.assert_awaited_once()


class TestRequestSessions:
    """Tests for commit and rollback of the per-request session."""

    async def test_created_book_is_committed(self, live_client: AsyncClient, file_engine):
        """Test a created book is visible to later requests and other connections."""
        payload = {
            "isbn": "9780140449136",
            "amazon_url": "https://amazon.com/odyssey",
            "author": "Homer",
            "language": "English",
            "pages": 560,
            "publisher": "Penguin Classics",
            "title": "The Odyssey",
            "year": 2003,
        }
        response = await live_client.post("/books", json=payload)
        assert response.status_code == 201

        response = await live_client.get("/books/9780140449136")
        assert response.status_code == 200
        assert response.json() == {"book": payload}

        assert await _stored_isbns(file_engine) == ["9780140449136"]

    async def test_duplicate_leaves_first_book(self, live_client: AsyncClient, book_payload):
        """Test a rejected duplicate does not disturb the stored book."""
        response = await live_client.post("/books", json=book_payload)
        assert response.status_code == 201

        response = await live_client.post("/books", json={**book_payload, "title": "copy"})
        assert response.status_code == 409

        response = await live_client.get(f"/books/{book_payload['isbn']}")
        assert response.json()["book"]["title"] == "my first book"

    async def test_failed_request_rolls_back(
        self, live_client: AsyncClient, book_payload, file_engine, monkeypatch
    ):
        """Test a request failing after its INSERT leaves no row behind."""
        insert = BookRepository.insert

        async def insert_then_fail(self, fields):
            await insert(self, fields)
            raise RuntimeError("store went away")

        monkeypatch.setattr(BookRepository, "insert", insert_then_fail)

        response = await live_client.post("/books", json=book_payload)
        assert response.status_code == 500

        response = await live_client.get("/books")
        assert response.json() == {"books": []}
        assert await _stored_isbns(file_engine) == []
