"""Book model."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from bookshelf.core.database import Base


class Book(Base):
    """Model representing a book, keyed by its ISBN."""

    __tablename__ = "books"

    isbn: Mapped[str] = mapped_column(String(20), primary_key=True)
    amazon_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    author: Mapped[str] = mapped_column(String(500), nullable=False)
    language: Mapped[str] = mapped_column(String(100), nullable=False)
    pages: Mapped[int] = mapped_column(Integer, nullable=False)
    publisher: Mapped[str] = mapped_column(String(500), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Book(isbn='{self.isbn}', title='{self.title}', author='{self.author}')>"
