from catalog.services.author_catalog import AuthorCatalog

__all__ = ["AuthorCatalog"]
