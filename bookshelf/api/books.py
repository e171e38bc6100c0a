"""Book API routes."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from bookshelf.api.schemas import BookEnvelope, BookListResponse, BookResponse, MessageResponse
from bookshelf.core.errors import BookNotFoundError, DuplicateIsbnError
from bookshelf.repositories.books import BookRepository, get_book_repository
from bookshelf.services.validation import validate

router = APIRouter(prefix="/books", tags=["books"])
logger = logging.getLogger(__name__)


def _validated(payload: Any, schema_name: str) -> dict[str, Any]:
    """Validate a request body or abort with 400 and the list of problems."""
    result = validate(payload, schema_name)
    if not result.valid:
        logger.debug(f"Rejected {schema_name} payload: {result.errors}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.errors)
    return result.data


@router.get("", response_model=BookListResponse)
async def list_books(
    repo: BookRepository = Depends(get_book_repository),
) -> BookListResponse:
    """List all books."""
    books = await repo.list_all()
    return BookListResponse(books=[BookResponse.model_validate(book) for book in books])


@router.get("/{isbn}", response_model=BookEnvelope)
async def get_book(
    isbn: str,
    repo: BookRepository = Depends(get_book_repository),
) -> BookEnvelope:
    """Get a specific book by ISBN."""
    try:
        book = await repo.get_by_isbn(isbn)
    except BookNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return BookEnvelope(book=BookResponse.model_validate(book))


@router.post("", response_model=BookEnvelope, status_code=status.HTTP_201_CREATED)
async def create_book(
    payload: Any = Body(None),
    repo: BookRepository = Depends(get_book_repository),
) -> BookEnvelope:
    """Create a new book."""
    book_data = _validated(payload, "bookCreate")

    try:
        book = await repo.insert(book_data)
    except DuplicateIsbnError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return BookEnvelope(book=BookResponse.model_validate(book))


@router.put("/{isbn}", response_model=BookEnvelope)
async def update_book(
    isbn: str,
    payload: Any = Body(None),
    repo: BookRepository = Depends(get_book_repository),
) -> BookEnvelope:
    """Replace every mutable field of a book.

    The body is validated before the book is looked up, so a malformed update
    is rejected with 400 even when the ISBN does not exist.
    """
    book_data = _validated(payload, "bookUpdate")

    try:
        book = await repo.update(isbn, book_data)
    except BookNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return BookEnvelope(book=BookResponse.model_validate(book))


@router.delete("/{isbn}", response_model=MessageResponse)
async def delete_book(
    isbn: str,
    repo: BookRepository = Depends(get_book_repository),
) -> MessageResponse:
    """Delete a book."""
    try:
        await repo.remove(isbn)
    except BookNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return MessageResponse(message="Book deleted")
