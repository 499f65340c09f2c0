from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.models.library import Library
from catalog.repositories.base import BaseRepository


class LibraryRepository(BaseRepository[Library]):
    """Libraries only need the generic CRUD operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Library)
