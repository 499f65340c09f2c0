"""Factory functions building unsaved model instances for tests."""

from catalog.models.author import Author


def create_author_fixture(library_id, name: str = "Test Author", **fields) -> Author:
    """
    Factory function to create Author instances for testing.

    Args:
        library_id: Owning library.
        name: Author name.
        **fields: Any other Author column.

    Returns:
        Author: Author instance (not persisted).
    """
    return Author(library_id=library_id, name=name, **fields)
