from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import Column, Index, Text, func
from sqlmodel import Field, Relationship

from catalog.models.base import BaseModel, TimestampMixin
from catalog.models.links import BookAuthor

if TYPE_CHECKING:
    from catalog.models.book import Book


class Author(BaseModel, TimestampMixin, table=True):
    """
    SQLModel representing a credited contributor in one library.

    This is a plain data model without Active Record methods.
    Use AuthorRepository (or AuthorCatalog) for all database operations.

    Attributes:
        id: UUID primary key, generated on creation.
        name: Display name used for exact and loose lookups.
        last_first: Derived "Last, First" display variant.
        asin: Optional external catalog identifier.
        description: Optional free text.
        image_path: Optional path to a portrait.
        library_id: Owning library; rows are removed with the library.
        is_alias_of: Canonical author this record is a pseudonym of. May
            dangle once the canonical author is removed.
    """

    __table_args__ = {"extend_existing": True}

    name: str = Field(min_length=1)
    last_first: Optional[str] = None
    asin: Optional[str] = None
    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    image_path: Optional[str] = None
    library_id: UUID = Field(
        foreign_key="library.id", index=True, ondelete="CASCADE"
    )
    # Plain id without a foreign key: deleting the target leaves aliases as they
    # are. AuthorCatalog checks the target when the alias is written.
    is_alias_of: Optional[UUID] = Field(default=None, index=True)

    books: List["Book"] = Relationship(
        back_populates="authors", link_model=BookAuthor
    )


# Case-insensitive lookup index; matches the lower(name) predicate used by
# AuthorRepository.find_by_name on every supported backend.
Index("ix_author_name_lower", func.lower(Author.__table__.c.name))
