"""
Helpers for comparing and displaying author names.

``normalize_name`` and ``normalized_name_expression`` remove the same
characters. Lookups run both the stored column and the query value through
the SQL expression, so identical strings always share a key.
"""

from sqlalchemy import ColumnElement, func

from catalog.constants import NAME_NORMALIZE_STRIP_CHARS

_strip_table = str.maketrans("", "", "".join(NAME_NORMALIZE_STRIP_CHARS))


def normalize_name(name: str) -> str:
    """
    Reduce a name to its loose-matching key.

    Removes the characters in NAME_NORMALIZE_STRIP_CHARS, then lowercases.

    Example:
        >>> normalize_name("J. R. R. Tolkien")
        'jrrtolkien'
    """
    return name.translate(_strip_table).lower()


def normalized_name_expression(column: ColumnElement) -> ColumnElement:
    """
    SQL counterpart of normalize_name for a column or bound value.

    Builds ``lower(replace(replace(... name ...)))`` with one replace() per
    stripped character.
    """
    expr = column
    for char in NAME_NORMALIZE_STRIP_CHARS:
        expr = func.replace(expr, char, "")
    return func.lower(expr)


def derive_last_first(name: str) -> str:
    """
    Build the "Last, First" display variant of a name.

    Names that already contain a comma, or consist of a single word, are
    returned stripped but otherwise unchanged.

    Example:
        >>> derive_last_first("Brandon Sanderson")
        'Sanderson, Brandon'
        >>> derive_last_first("J. R. R. Tolkien")
        'Tolkien, J. R. R.'
    """
    name = " ".join(name.split())
    if "," in name:
        return name
    parts = name.split(" ")
    if len(parts) < 2:
        return name
    return f"{parts[-1]}, {' '.join(parts[:-1])}"
