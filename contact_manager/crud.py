"""CRUD operations for users and contacts.

This module contains database interaction logic for account and contact
entities, isolated from FastAPI route handlers. Listing functions execute
:class:`~contact_manager.query.ListQuery` descriptors.
"""

from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, contains_eager

from . import models
from .policy import ALL_OWNERS
from .query import ListQuery


def _search_clause(term: str, *columns):
    return or_(*(column.icontains(term, autoescape=True) for column in columns))


def _order_by(model, query: ListQuery):
    column = getattr(model, query.sort_field)
    primary = column.desc() if query.descending else column.asc()
    return primary, model.id.asc()


def _count(db: Session, stmt) -> int:
    return db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))


def create_user(
    db: Session,
    name: str,
    email: str,
    hashed_password: str,
    phone: str | None = None,
    role: str = models.ROLE_USER,
    is_active: bool = True,
) -> models.User:
    """
    Persist a new account.

    Uniqueness of ``email`` is checked by the caller; the unique index
    still rejects a concurrent duplicate.

    Returns:
        User: Newly created account.
    """
    now = models.utcnow()
    user = models.User(
        name=name,
        email=email,
        phone=phone,
        hashed_password=hashed_password,
        role=role,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_email(db: Session, email: str) -> models.User | None:
    """
    Retrieve a user by email address.

    Args:
        db (Session): Database session.
        email (str): User email.

    Returns:
        User | None: User if found, otherwise ``None``.
    """
    return db.execute(
        select(models.User).where(models.User.email == email.strip().lower())
    ).scalar_one_or_none()


def get_user_by_id(db: Session, user_id: str) -> models.User | None:
    """
    Retrieve a user by primary key.

    Args:
        db (Session): Database session.
        user_id (str): User identifier.

    Returns:
        User | None: User if found, otherwise ``None``.
    """
    return db.execute(
        select(models.User).where(models.User.id == user_id)
    ).scalar_one_or_none()


def find_user_page(
    db: Session, query: ListQuery
) -> tuple[Sequence[models.User], int]:
    """
    Fetch one page of accounts and the total number of matches.

    Searches name, email and phone.
    """
    stmt = select(models.User)
    if query.search:
        stmt = stmt.where(
            _search_clause(
                query.search, models.User.name, models.User.email, models.User.phone
            )
        )
    total = _count(db, stmt)
    stmt = stmt.order_by(*_order_by(models.User, query))
    items = db.scalars(stmt.offset(query.offset).limit(query.limit)).all()
    return items, total


def count_user_contacts(db: Session, user_id: str) -> int:
    return db.scalar(
        select(func.count())
        .select_from(models.Contact)
        .where(models.Contact.owner_id == user_id)
    )


def update_user_photo(db: Session, user: models.User, photo_url: str) -> models.User:
    """
    Update photo URL for a user.

    Args:
        db (Session): Database session.
        user (User): Target user.
        photo_url (str): URL of uploaded photo.

    Returns:
        User: Updated user instance.
    """
    user.photo = photo_url
    user.updated_at = models.utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: models.User) -> None:
    db.delete(user)
    db.commit()


def create_contact(db: Session, owner_id: str, fields: dict) -> models.Contact:
    """
    Create a new contact owned by the given account.

    Args:
        db (Session): Database session.
        owner_id (str): Owning account id.
        fields (dict): Contact column values.

    Returns:
        Contact: Newly created contact.
    """
    now = models.utcnow()
    contact = models.Contact(
        **fields, owner_id=owner_id, created_at=now, updated_at=now
    )
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def get_contact(db: Session, contact_id: str, owner_scope: str):
    """
    Retrieve a single contact inside an owner scope.

    A contact owned by another account is reported as missing.

    Args:
        db (Session): Database session.
        contact_id (str): Contact identifier.
        owner_scope (str): Owner id or ``ALL_OWNERS``.

    Returns:
        Contact | None: Contact if found, otherwise ``None``.
    """
    stmt = select(models.Contact).where(models.Contact.id == contact_id)
    if owner_scope != ALL_OWNERS:
        stmt = stmt.where(models.Contact.owner_id == owner_scope)
    return db.execute(stmt).scalar_one_or_none()


def _contacts_statement(query: ListQuery):
    if query.owner_scope == ALL_OWNERS:
        stmt = select(models.Contact).join(models.Contact.owner)
        searchable = (
            models.Contact.name,
            models.Contact.email,
            models.Contact.phone,
            models.User.name,
            models.User.email,
        )
    else:
        stmt = select(models.Contact).where(
            models.Contact.owner_id == query.owner_scope
        )
        searchable = (models.Contact.name, models.Contact.email, models.Contact.phone)

    if query.search:
        stmt = stmt.where(_search_clause(query.search, *searchable))
    return stmt


def _with_owner(stmt, query: ListQuery):
    # the owner is already joined in admin-wide listings
    if query.owner_scope == ALL_OWNERS:
        return stmt.options(contains_eager(models.Contact.owner))
    return stmt


def find_contact_page(
    db: Session, query: ListQuery
) -> tuple[Sequence[models.Contact], int]:
    """
    Fetch one page of contacts and the total number of matches.

    The count and the page are two separate statements, so the total may
    be stale by the time the page is read.

    Args:
        db (Session): Database session.
        query (ListQuery): Listing descriptor.

    Returns:
        tuple: Contacts on the page and the total count.
    """
    stmt = _contacts_statement(query)
    total = _count(db, stmt)
    stmt = _with_owner(stmt, query).order_by(*_order_by(models.Contact, query))
    items = db.scalars(stmt.offset(query.offset).limit(query.limit)).all()
    return items, total


def find_contacts(db: Session, query: ListQuery) -> Sequence[models.Contact]:
    """Fetch every contact matching ``query``, ignoring pagination."""
    stmt = _with_owner(_contacts_statement(query), query)
    return db.scalars(stmt.order_by(*_order_by(models.Contact, query))).all()


def update_contact(db: Session, contact: models.Contact, changes: dict):
    """
    Update mutable fields of a contact.

    Only keys present in ``changes`` are written; an empty mapping leaves
    the row untouched.

    Args:
        db (Session): Database session.
        contact (Contact): Contact instance.
        changes (dict): Fields to update.

    Returns:
        Contact: Updated contact.
    """
    if not changes:
        return contact

    for key, value in changes.items():
        setattr(contact, key, value)
    contact.updated_at = models.utcnow()

    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def delete_contact(db: Session, contact: models.Contact):
    """
    Delete a contact from the database.

    Args:
        db (Session): Database session.
        contact (Contact): Contact to delete.
    """
    db.delete(contact)
    db.commit()
    return None
