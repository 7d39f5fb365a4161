"""Query helpers shared by the list endpoints."""

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Query


def json_array_contains_any(column, values: list[str]):
    """
    Match rows whose JSON array column holds ANY of the values.

    Portable across SQLite and PostgreSQL: the array is compared as text
    against the quoted JSON string of each value.
    """
    return or_(*[cast(column, String).contains(f'"{value}"', autoescape=True) for value in values])


def paginate(query: Query, page: int | None, per_page: int | None) -> Query:
    """Apply page/per_page pagination (offset = (page - 1) * per_page)"""
    if page and per_page:
        return query.offset((page - 1) * per_page).limit(per_page)
    return query
