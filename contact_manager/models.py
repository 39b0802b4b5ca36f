"""Database models for the contact manager.

This module defines SQLAlchemy ORM models used by the application.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from .database import Base


ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    SQLAlchemy model representing an application account.

    An account owns zero or more contacts. Accounts with the ``admin``
    role may act on behalf of any other account.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    photo = Column(String(500), nullable=True)
    role = Column(String(20), default=ROLE_USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    #: Contacts owned by the account. Deleting an account that still owns
    #: contacts is refused, so there is no cascade here.
    contacts = relationship("Contact", back_populates="owner", passive_deletes="all")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class Contact(Base):
    """
    SQLAlchemy model representing a contact entry.

    Each contact belongs to exactly one account.
    """

    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, index=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(500), nullable=True)
    company = Column(String(100), nullable=True)
    position = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    photo = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    #: Identifier of the owning account
    owner_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    #: Reference to the owning User object
    owner = relationship("User", back_populates="contacts")
