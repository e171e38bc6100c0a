"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookshelf.core.database import Base, build_engine, get_db
from bookshelf.main import app
from bookshelf.models.book import Book
from bookshelf.repositories.books import BookRepository

# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SAMPLE_BOOK = {
    "isbn": "123432122",
    "amazon_url": "https://amazon.com/taco",
    "author": "Elie",
    "language": "English",
    "pages": 100,
    "publisher": "Nothing publishers",
    "title": "my first book",
    "year": 2008,
}


@pytest.fixture
async def test_engine():
    """Create a test database engine."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest.fixture
async def override_get_db(test_session: AsyncSession):
    """Override the get_db dependency for testing."""

    async def _override_get_db():
        yield test_session

    return _override_get_db


@pytest.fixture
def repository(test_session: AsyncSession) -> BookRepository:
    """Create a repository bound to the test session."""
    return BookRepository(test_session)


@pytest.fixture
async def client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def book_payload() -> dict:
    """A fresh copy of the sample book fields."""
    return dict(SAMPLE_BOOK)


@pytest.fixture
def update_payload() -> dict:
    """A valid update body for the sample book."""
    return {
        "amazon_url": "https://burrito.com",
        "author": "chipotle",
        "language": "spanish",
        "pages": 1000,
        "publisher": "deez publishes",
        "title": "BOOK UPDATED",
        "year": 2022,
    }


@pytest.fixture
async def sample_book(test_session: AsyncSession) -> Book:
    """Create a sample book for testing."""
    book = Book(**SAMPLE_BOOK)
    test_session.add(book)
    await test_session.flush()
    return book
