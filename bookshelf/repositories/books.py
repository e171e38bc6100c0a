"""Data access for books."""

import logging
from typing import Any

from fastapi import Depends
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.core.database import get_db
from bookshelf.core.errors import BookNotFoundError, DuplicateIsbnError
from bookshelf.models.book import Book

logger = logging.getLogger(__name__)


class BookRepository:
    """Repository issuing one statement per book operation, keyed by ISBN."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_all(self) -> list[Book]:
        """List all books in primary-key order."""
        result = await self.db.execute(select(Book).order_by(Book.isbn))
        return list(result.scalars().all())

    async def get_by_isbn(self, isbn: str) -> Book:
        """Get a book by ISBN."""
        result = await self.db.execute(select(Book).where(Book.isbn == isbn))
        book = result.scalar_one_or_none()
        if book is None:
            raise BookNotFoundError(isbn)
        return book

    async def insert(self, fields: dict[str, Any]) -> Book:
        """Insert a new book. The ISBN must not be in use."""
        book = Book(**fields)
        try:
            # Savepoint: a failed INSERT leaves the rest of the transaction intact
            async with self.db.begin_nested():
                self.db.add(book)
                await self.db.flush()
        except IntegrityError:
            raise DuplicateIsbnError(fields["isbn"]) from None

        logger.info(f"Created book {book.isbn}")
        return book

    async def update(self, isbn: str, fields: dict[str, Any]) -> Book:
        """Replace every mutable field of an existing book."""
        query = update(Book).where(Book.isbn == isbn).values(**fields).returning(Book)
        result = await self.db.execute(query)
        book = result.scalar_one_or_none()
        if book is None:
            raise BookNotFoundError(isbn)

        logger.info(f"Updated book {isbn}")
        return book

    async def remove(self, isbn: str) -> None:
        """Delete a book."""
        result = await self.db.execute(delete(Book).where(Book.isbn == isbn))
        if result.rowcount == 0:
            raise BookNotFoundError(isbn)

        logger.info(f"Deleted book {isbn}")


def get_book_repository(db: AsyncSession = Depends(get_db)) -> BookRepository:
    """Dependency that provides a repository bound to the request session."""
    return BookRepository(db)
