"""Account routes: the caller's profile and admin account management."""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from fastapi_limiter.depends import RateLimiter
from sqlalchemy.orm import Session

from . import schemas, crud, services
from .auth import get_current_user, get_password_hash
from .database import get_db
from .models import User
from .pagination import Page
from .policy import require_admin
from .storage import USER_PHOTOS, upload_photo

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=schemas.UserOut,
    dependencies=[Depends(RateLimiter(times=5, seconds=60))],
)
def read_me(current_user: User = Depends(get_current_user)):
    """
    Retrieve details of the currently authenticated user.

    Args:
        current_user (User): Authenticated user obtained from JWT token.

    Returns:
        UserOut: User profile information.
    """
    return current_user


@router.put("/me/photo", response_model=schemas.UserOut)
def update_my_photo(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Upload a profile photo for the authenticated user.

    Raises:
        InvalidArgument: If the file is not an accepted image.
        Unexpected: If photo storage is unavailable.

    Returns:
        UserOut: Updated user profile.
    """
    photo_url = upload_photo(file, USER_PHOTOS)
    return crud.update_user_photo(db, current_user, photo_url)


@router.post("/", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: schemas.AdminUserCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an account with any role. Administrators only."""
    require_admin(current_user)
    return services.create_account(
        db,
        user_in,
        get_password_hash(user_in.password),
        role=user_in.role,
        is_active=user_in.is_active,
    )


@router.get("/", response_model=Page[schemas.UserOut])
def list_users(
    page: int = 1,
    limit: int = 10,
    search: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List accounts with search and sorting. Administrators only."""
    return services.list_users(
        db, current_user, search, sort_by, sort_order, page, limit
    )


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Retrieve an account by ID. Administrators only."""
    return services.get_user(db, current_user, user_id)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete an account. Administrators only.

    Accounts that still own contacts cannot be deleted.
    """
    services.delete_user(db, current_user, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
