"""Listing query descriptors.

``build_query`` validates and normalizes listing parameters into a
:class:`ListQuery`. The descriptor carries no SQL; ``crud`` turns it into
statements.
"""

from dataclasses import dataclass

from .errors import InvalidArgument


MAX_LIMIT = 100
DEFAULT_LIMIT = 10
DEFAULT_SORT_FIELD = "created_at"
DEFAULT_SORT_ORDER = "DESC"
SORT_ORDERS = ("ASC", "DESC")

CONTACT_SORT_FIELDS = ("name", "email", "phone", "created_at", "updated_at")
USER_SORT_FIELDS = (
    "name",
    "email",
    "phone",
    "role",
    "is_active",
    "created_at",
    "updated_at",
)

# camelCase names used by API clients
SORT_ALIASES = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "isActive": "is_active",
}


@dataclass(frozen=True)
class ListQuery:
    """Filter, sort and pagination plan for one listing call."""

    owner_scope: str
    search: str | None
    sort_field: str
    sort_order: str
    page: int
    offset: int
    limit: int

    @property
    def descending(self) -> bool:
        return self.sort_order == "DESC"


def resolve_sort(
    sort_field: str | None,
    sort_order: str | None,
    sort_fields: tuple[str, ...] = CONTACT_SORT_FIELDS,
) -> tuple[str, str]:
    """
    Pick the column and direction to sort by.

    Unknown fields fall back to ``created_at DESC`` instead of failing.

    Raises:
        InvalidArgument: If ``sort_order`` is neither ASC nor DESC.
    """
    order = (sort_order or DEFAULT_SORT_ORDER).upper()
    if order not in SORT_ORDERS:
        raise InvalidArgument("Sort order must be ASC or DESC")

    field = SORT_ALIASES.get(sort_field, sort_field) if sort_field else None
    if field not in sort_fields:
        return DEFAULT_SORT_FIELD, DEFAULT_SORT_ORDER
    return field, order


def build_query(
    owner_scope: str,
    search: str | None = None,
    sort_field: str | None = None,
    sort_order: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    sort_fields: tuple[str, ...] = CONTACT_SORT_FIELDS,
) -> ListQuery:
    """
    Build a listing descriptor.

    Args:
        owner_scope (str): Effective owner id or ``ALL_OWNERS``.
        search (str | None): Case-insensitive substring to match.
        sort_field (str | None): Column to sort by.
        sort_order (str | None): ``ASC`` or ``DESC``.
        page (int): 1-based page number.
        limit (int): Page size, 1 to 100.
        sort_fields (tuple[str, ...]): Sortable columns.

    Raises:
        InvalidArgument: If the page, limit or sort order is invalid.

    Returns:
        ListQuery: Normalized query descriptor.
    """
    if page < 1:
        raise InvalidArgument("Page must be greater than 0")
    if limit < 1 or limit > MAX_LIMIT:
        raise InvalidArgument(f"Limit must be between 1 and {MAX_LIMIT}")

    field, order = resolve_sort(sort_field, sort_order, sort_fields)
    term = search.strip() if search else None

    return ListQuery(
        owner_scope=owner_scope,
        search=term or None,
        sort_field=field,
        sort_order=order,
        page=page,
        offset=(page - 1) * limit,
        limit=limit,
    )
