"""Service layer for contacts and accounts.

Each operation resolves the caller's effective owner scope through
:mod:`contact_manager.policy` first, then builds a listing descriptor when
needed and hands it to :mod:`contact_manager.crud`. Store failures are
logged and re-raised as :class:`~contact_manager.errors.Unexpected`, so
driver messages never reach API callers.
"""

import csv
import io
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .errors import Conflict, NotFound, Unexpected
from .pagination import wrap
from .policy import require_admin, resolve_global_scope, resolve_owner_scope
from .query import USER_SORT_FIELDS, build_query

logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "id",
    "name",
    "email",
    "phone",
    "address",
    "company",
    "position",
    "notes",
    "photo",
    "created_at",
    "updated_at",
)


@contextmanager
def store_errors(db: Session, operation: str):
    """Translate store failures into :class:`Unexpected`."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store failure during %s", operation)
        raise Unexpected() from exc


def _require_contact(db: Session, contact_id: str, owner_scope: str) -> models.Contact:
    contact = crud.get_contact(db, contact_id, owner_scope)
    if contact is None:
        raise NotFound("Contact not found")
    return contact


def list_contacts(
    db: Session,
    caller: models.User,
    target_user_id: str | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """
    List contacts of the caller, or of ``target_user_id`` for admins.

    Returns:
        dict: Pagination envelope.
    """
    owner_scope = resolve_owner_scope(caller, target_user_id)
    query = build_query(owner_scope, search, sort_by, sort_order, page, limit)
    with store_errors(db, "list_contacts"):
        items, total = crud.find_contact_page(db, query)
    return wrap(items, total, query.page, query.limit)


def list_all_contacts(
    db: Session,
    caller: models.User,
    search: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """List contacts across every account. Admins only."""
    owner_scope = resolve_global_scope(caller)
    query = build_query(owner_scope, search, sort_by, sort_order, page, limit)
    with store_errors(db, "list_all_contacts"):
        items, total = crud.find_contact_page(db, query)
    return wrap(items, total, query.page, query.limit)


def export_contacts_csv(
    db: Session,
    caller: models.User,
    target_user_id: str | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
) -> str:
    """
    Render the scoped contact list as CSV.

    Search and sorting follow :func:`list_contacts`; every matching row is
    included.

    Returns:
        str: CSV document with a header row.
    """
    owner_scope = resolve_owner_scope(caller, target_user_id)
    query = build_query(owner_scope, search, sort_by, sort_order)
    with store_errors(db, "export_contacts_csv"):
        contacts = crud.find_contacts(db, query)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)
    for contact in contacts:
        row = []
        for column in CSV_COLUMNS:
            value = getattr(contact, column)
            if value is None:
                value = ""
            elif column in ("created_at", "updated_at"):
                value = value.isoformat()
            row.append(value)
        writer.writerow(row)
    return output.getvalue()


def get_contact(
    db: Session,
    caller: models.User,
    contact_id: str,
    target_user_id: str | None = None,
) -> models.Contact:
    """
    Fetch one contact in the caller's effective scope.

    Raises:
        Forbidden: If a non-admin targets another account.
        NotFound: If the contact is absent or owned by someone else.
    """
    owner_scope = resolve_owner_scope(caller, target_user_id)
    with store_errors(db, "get_contact"):
        return _require_contact(db, contact_id, owner_scope)


def create_contact(
    db: Session,
    caller: models.User,
    contact_in: schemas.ContactCreate,
    target_user_id: str | None = None,
) -> tuple[models.Contact, models.User]:
    """
    Create a contact for the caller, or for ``target_user_id`` (admins).

    Raises:
        Forbidden: If a non-admin targets another account.
        NotFound: If the target account does not exist.

    Returns:
        tuple: The new contact and its owner.
    """
    owner_id = resolve_owner_scope(caller, target_user_id)
    with store_errors(db, "create_contact"):
        owner = caller if owner_id == caller.id else crud.get_user_by_id(db, owner_id)
        if owner is None:
            raise NotFound("User not found")
        contact = crud.create_contact(db, owner.id, contact_in.model_dump())
    logger.info("Contact %s created for account %s", contact.id, owner.id)
    return contact, owner


def update_contact(
    db: Session,
    caller: models.User,
    contact_id: str,
    changes: dict,
    target_user_id: str | None = None,
) -> models.Contact:
    """
    Apply a partial update. Keys missing from ``changes`` are left as is.

    Raises:
        Forbidden: If a non-admin targets another account.
        NotFound: If the contact is absent or owned by someone else.
    """
    owner_scope = resolve_owner_scope(caller, target_user_id)
    with store_errors(db, "update_contact"):
        contact = _require_contact(db, contact_id, owner_scope)
        return crud.update_contact(db, contact, changes)


def set_contact_photo(
    db: Session,
    caller: models.User,
    contact_id: str,
    photo_url: str,
    target_user_id: str | None = None,
) -> models.Contact:
    return update_contact(
        db, caller, contact_id, {"photo": photo_url}, target_user_id
    )


def delete_contact(
    db: Session,
    caller: models.User,
    contact_id: str,
    target_user_id: str | None = None,
) -> None:
    """
    Permanently delete a contact.

    Raises:
        Forbidden: If a non-admin targets another account.
        NotFound: If the contact is absent or owned by someone else.
    """
    owner_scope = resolve_owner_scope(caller, target_user_id)
    with store_errors(db, "delete_contact"):
        contact = _require_contact(db, contact_id, owner_scope)
        crud.delete_contact(db, contact)
    logger.info("Contact %s deleted by account %s", contact_id, caller.id)


def create_account(
    db: Session,
    user_in: schemas.UserCreate,
    hashed_password: str,
    role: str = models.ROLE_USER,
    is_active: bool = True,
) -> models.User:
    """
    Create an account with a unique email.

    Raises:
        Conflict: If the email is already registered.
    """
    email = user_in.email.strip().lower()
    with store_errors(db, "create_account"):
        if crud.get_user_by_email(db, email):
            raise Conflict("User with this email already exists")
        return crud.create_user(
            db,
            name=user_in.name.strip(),
            email=email,
            hashed_password=hashed_password,
            phone=user_in.phone.strip() if user_in.phone else None,
            role=role,
            is_active=is_active,
        )


def list_users(
    db: Session,
    caller: models.User,
    search: str | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """List accounts. Admins only."""
    owner_scope = resolve_global_scope(caller)
    query = build_query(
        owner_scope, search, sort_by, sort_order, page, limit, USER_SORT_FIELDS
    )
    with store_errors(db, "list_users"):
        items, total = crud.find_user_page(db, query)
    return wrap(items, total, query.page, query.limit)


def get_user(db: Session, caller: models.User, user_id: str) -> models.User:
    require_admin(caller)
    with store_errors(db, "get_user"):
        user = crud.get_user_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def delete_user(db: Session, caller: models.User, user_id: str) -> None:
    """
    Delete an account that owns no contacts. Admins only.

    Raises:
        Forbidden: If the caller is not an admin.
        NotFound: If the account does not exist.
        Conflict: If the account still owns contacts.
    """
    user = get_user(db, caller, user_id)
    with store_errors(db, "delete_user"):
        if crud.count_user_contacts(db, user.id) > 0:
            raise Conflict(
                "Cannot delete user with existing contacts. "
                "Please delete their contacts first."
            )
        crud.delete_user(db, user)
    logger.info("Account %s deleted by admin %s", user_id, caller.id)
