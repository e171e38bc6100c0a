"""Pydantic schemas for API request/response validation."""

from pydantic import BaseModel, ConfigDict, Field

# scheme "://" followed by a non-empty host part
URI_PATTERN = r"^[A-Za-z][A-Za-z0-9+.\-]*://[^\s/?#]+\S*$"

# Range of a 32-bit INTEGER column; larger values cannot be stored
INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1


# Book request schemas
class BookFields(BaseModel):
    """Mutable book fields shared by the create and update schemas."""

    model_config = ConfigDict(extra="forbid", strict=True)

    amazon_url: str = Field(..., min_length=1, max_length=1000, pattern=URI_PATTERN)
    author: str = Field(..., min_length=1, max_length=500)
    language: str = Field(..., min_length=1, max_length=100)
    pages: int = Field(..., gt=0, le=INTEGER_MAX)
    publisher: str = Field(..., min_length=1, max_length=500)
    title: str = Field(..., min_length=1, max_length=500)
    year: int = Field(..., ge=INTEGER_MIN, le=INTEGER_MAX)


class BookCreate(BookFields):
    """Schema for creating a new book."""

    isbn: str = Field(..., min_length=1, max_length=20)


class BookUpdate(BookFields):
    """Schema for replacing a book's mutable fields. The ISBN is not allowed."""


# Book response schemas
class BookResponse(BaseModel):
    """Schema for a single book."""

    model_config = ConfigDict(from_attributes=True)

    isbn: str
    amazon_url: str
    author: str
    language: str
    pages: int
    publisher: str
    title: str
    year: int


class BookEnvelope(BaseModel):
    """Schema wrapping a single book response."""

    book: BookResponse


class BookListResponse(BaseModel):
    """Schema for list of books response."""

    books: list[BookResponse]


class MessageResponse(BaseModel):
    """Schema for a plain confirmation message."""

    message: str
