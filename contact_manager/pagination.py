"""Pagination envelope shared by listing endpoints."""

from typing import Any, Generic, List, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a listing plus its navigation metadata."""

    items: List[T]
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool


def total_pages(total_count: int, limit: int) -> int:
    """Number of pages needed for ``total_count`` rows; 0 when empty."""
    if total_count <= 0:
        return 0
    return (total_count + limit - 1) // limit


def wrap(items: Sequence[Any], total_count: int, page: int, limit: int) -> dict:
    """
    Package fetched rows with page metadata.

    A page past the end is not an error; it simply has no items.

    Args:
        items (Sequence): Rows actually fetched for this page.
        total_count (int): Number of rows matching the filter.
        page (int): 1-based page number.
        limit (int): Page size.

    Returns:
        dict: Envelope matching :class:`Page`.
    """
    pages = total_pages(total_count, limit)
    return {
        "items": list(items),
        "page": page,
        "limit": limit,
        "total_count": total_count,
        "total_pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }
