"""Contact management routes.

Every route accepts an optional ``user_id`` query parameter that lets an
administrator act on behalf of another account.
"""

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Query,
    Response,
    UploadFile,
    status,
)
from sqlalchemy.orm import Session

from . import schemas, services
from .auth import get_current_user
from .database import get_db
from .models import User
from .notifications import notify_contact_created
from .pagination import Page
from .storage import CONTACT_PHOTOS, upload_photo

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.post(
    "/", response_model=schemas.ContactOut, status_code=status.HTTP_201_CREATED
)
def create_contact(
    contact_in: schemas.ContactCreate,
    background_tasks: BackgroundTasks,
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a new contact and email its owner.

    Args:
        contact_in (ContactCreate): Contact input data.
        background_tasks (BackgroundTasks): Queue for the notification email.
        user_id (str | None): Owner to create the contact for.
        db (Session): Database session.
        current_user (User): Authenticated user.

    Returns:
        ContactOut: Created contact.
    """
    contact, owner = services.create_contact(db, current_user, contact_in, user_id)
    notify_contact_created(background_tasks, contact, owner)
    return contact


@router.get("/", response_model=Page[schemas.ContactOut])
def list_contacts(
    page: int = 1,
    limit: int = 10,
    search: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve a page of contacts.

    Supports case-insensitive search by name, email or phone and sorting
    by name, email, phone, createdAt or updatedAt.

    Returns:
        Page[ContactOut]: Contacts with pagination metadata.
    """
    return services.list_contacts(
        db, current_user, user_id, search, sort_by, sort_order, page, limit
    )


@router.get("/all", response_model=Page[schemas.ContactWithOwnerOut])
def list_all_contacts(
    page: int = 1,
    limit: int = 10,
    search: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve contacts of every account. Administrators only.

    The search term also matches the owner's name and email.
    """
    return services.list_all_contacts(
        db, current_user, search, sort_by, sort_order, page, limit
    )


@router.get("/export")
def export_contacts(
    search: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Download the matching contacts as a CSV attachment."""
    content = services.export_contacts_csv(
        db, current_user, user_id, search, sort_by, sort_order
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=contacts.csv"},
    )


@router.get("/{contact_id}", response_model=schemas.ContactOut)
def get_contact(
    contact_id: str,
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve a single contact by ID.

    Raises:
        NotFound: If the contact is absent or belongs to another account.
    """
    return services.get_contact(db, current_user, contact_id, user_id)


@router.patch("/{contact_id}", response_model=schemas.ContactOut)
def patch_contact(
    contact_id: str,
    changes: schemas.ContactUpdate,
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Partially update an existing contact.

    Only fields provided in the request will be updated.
    """
    return services.update_contact(
        db, current_user, contact_id, changes.model_dump(exclude_unset=True), user_id
    )


@router.put("/{contact_id}/photo", response_model=schemas.ContactOut)
def update_contact_photo(
    contact_id: str,
    file: UploadFile = File(...),
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Upload a photo and attach its URL to the contact."""
    services.get_contact(db, current_user, contact_id, user_id)
    photo_url = upload_photo(file, CONTACT_PHOTOS)
    return services.set_contact_photo(db, current_user, contact_id, photo_url, user_id)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_contact(
    contact_id: str,
    user_id: str | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a contact."""
    services.delete_contact(db, current_user, contact_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
