from sqlmodel import Field

from catalog.models.base import BaseModel, TimestampMixin


class Library(BaseModel, TimestampMixin, table=True):
    """
    Namespace owning authors, series and library items.

    Deleting a library removes everything it owns through ON DELETE CASCADE
    foreign keys declared on the owned tables.
    """

    __table_args__ = {"extend_existing": True}

    name: str = Field(min_length=1)
