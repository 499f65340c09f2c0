from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(SQLModel):
    """
    Common columns for catalog tables.

    Primary keys are UUIDs generated client side so records can reference
    each other (aliases, bulk batches) before they are flushed.
    """

    id: Optional[UUID] = Field(default_factory=uuid4, primary_key=True)


class TimestampMixin(SQLModel):
    """Store-managed creation and modification timestamps."""

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": utcnow},
    )
