"""
Tests for listing the library items credited to an author.
"""

from uuid import uuid4

import pytest

from catalog.exceptions import NotFoundError
from catalog.schemas.library_item import LibraryItemWithMedia


class TestListLibraryItemsForAuthor:
    @pytest.mark.asyncio
    async def test_unknown_author_raises_not_found(self, catalog):
        with pytest.raises(NotFoundError):
            await catalog.list_library_items_for_author(uuid4())

    @pytest.mark.asyncio
    async def test_author_without_books(self, catalog, library):
        author = await catalog.create({"name": "Unpublished", "library_id": library.id})

        assert await catalog.list_library_items_for_author(author.id) == []

    @pytest.mark.asyncio
    async def test_one_item_per_book_with_media(
        self, catalog, library, seed_book
    ):
        author = await catalog.create({"name": "Ann Leckie", "library_id": library.id})
        await seed_book(library.id, "Ancillary Justice", [author.id], path="/books/aj")
        await seed_book(library.id, "Ancillary Sword", [author.id], path="/books/as")

        items = await catalog.list_library_items_for_author(author.id)

        assert len(items) == 2
        assert all(isinstance(item, LibraryItemWithMedia) for item in items)
        assert sorted(item.media.title for item in items) == ["Ancillary Justice", "Ancillary Sword"]
        assert {item.path for item in items} == {"/books/aj", "/books/as"}
        assert all(item.library_id == library.id for item in items)

    @pytest.mark.asyncio
    async def test_media_carries_all_authors(self, catalog, library, seed_book):
        pratchett = await catalog.create(
            {"name": "Terry Pratchett", "library_id": library.id}
        )
        gaiman = await catalog.create({"name": "Neil Gaiman", "library_id": library.id})
        await seed_book(
            library.id, "Good Omens", [pratchett.id, gaiman.id], path="/books/go"
        )

        (item,) = await catalog.list_library_items_for_author(gaiman.id)

        assert {a.name for a in item.media.authors} == {"Terry Pratchett", "Neil Gaiman"}

    @pytest.mark.asyncio
    async def test_media_carries_series_sequence(
        self, catalog, library, seed_book, seed_series
    ):
        author = await catalog.create(
            {"name": "Brandon Sanderson", "library_id": library.id}
        )
        series = await seed_series(library.id, "Mistborn")
        await seed_book(
            library.id,
            "The Well of Ascension",
            [author.id],
            path="/books/mb2",
            series=[(series.id, "2")],
        )

        (item,) = await catalog.list_library_items_for_author(author.id)

        assert len(item.media.series) == 1
        assert item.media.series[0].name == "Mistborn"
        assert item.media.series[0].sequence == "2"

    @pytest.mark.asyncio
    async def test_books_without_library_item_are_skipped(
        self, catalog, library, seed_book
    ):
        author = await catalog.create({"name": "Gene Wolfe", "library_id": library.id})
        await seed_book(library.id, "Shadow of the Torturer", [author.id], path="/b/1")
        await seed_book(library.id, "Claw of the Conciliator", [author.id])

        items = await catalog.list_library_items_for_author(author.id)

        assert [item.media.title for item in items] == ["Shadow of the Torturer"]

    @pytest.mark.asyncio
    async def test_other_authors_books_not_listed(self, catalog, library, seed_book):
        author = await catalog.create({"name": "Mine", "library_id": library.id})
        other = await catalog.create({"name": "Theirs", "library_id": library.id})
        await seed_book(library.id, "Mine Book", [author.id], path="/b/mine")
        await seed_book(library.id, "Their Book", [other.id], path="/b/theirs")

        items = await catalog.list_library_items_for_author(author.id)

        assert [item.media.title for item in items] == ["Mine Book"]

    @pytest.mark.asyncio
    async def test_uses_injected_book_repository(self, session_factory, library):
        """Test the catalog joins through the repository it was given."""
        from unittest.mock import AsyncMock, MagicMock

        from catalog.services.author_catalog import AuthorCatalog

        book_repo = MagicMock()
        book_repo.list_for_author = AsyncMock(return_value=[])
        catalog = AuthorCatalog(
            session_factory, book_repository=lambda session: book_repo
        )
        author = await catalog.create({"name": "Injected", "library_id": library.id})

        assert await catalog.list_library_items_for_author(author.id) == []
        book_repo.list_for_author.assert_awaited_once_with(author.id)
