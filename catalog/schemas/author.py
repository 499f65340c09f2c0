from typing import Optional
from uuid import UUID

from pydantic import field_validator
from sqlmodel import Field, SQLModel


def _require_text(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class AuthorCreate(SQLModel):
    """Input model for creating an author."""

    id: Optional[UUID] = Field(
        default=None, description="Author ID, generated when omitted"
    )
    name: str = Field(..., min_length=1, description="Display name")
    library_id: UUID = Field(..., description="Owning library")
    last_first: Optional[str] = Field(
        default=None, description='"Last, First" variant, derived when omitted'
    )
    asin: Optional[str] = None
    description: Optional[str] = None
    image_path: Optional[str] = None
    is_alias_of: Optional[UUID] = Field(
        default=None, description="Canonical author this record aliases"
    )

    check_name = field_validator("name")(_require_text)


class AuthorUpdate(SQLModel):
    """
    Input model for replacing fields of an existing author.

    Only fields that were explicitly set are written, so passing every field
    replaces the whole record. ``library_id`` cannot be changed.
    """

    id: UUID = Field(..., description="Author ID to update")
    name: Optional[str] = Field(default=None, min_length=1)
    last_first: Optional[str] = None
    asin: Optional[str] = None
    description: Optional[str] = None
    image_path: Optional[str] = None
    is_alias_of: Optional[UUID] = None

    check_name = field_validator("name")(_require_text)
