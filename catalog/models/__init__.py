from catalog.models.author import Author
from catalog.models.base import BaseModel, TimestampMixin
from catalog.models.book import Book, LibraryItem, Series
from catalog.models.library import Library
from catalog.models.links import BookAuthor, BookSeries

__all__ = [
    "Author",
    "BaseModel",
    "Book",
    "BookAuthor",
    "BookSeries",
    "Library",
    "LibraryItem",
    "Series",
    "TimestampMixin",
]
