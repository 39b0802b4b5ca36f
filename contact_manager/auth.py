"""Authentication routes and helpers."""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from sqlalchemy.orm import Session

from . import schemas, crud, services
from .database import get_db
from .models import ROLE_ADMIN, User
from .core import get_settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
router = APIRouter(prefix="/auth", tags=["auth"])


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password with its hashed value."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a password hash using the configured context."""
    return pwd_context.hash(password)


def create_access_token(
    data: dict, expires_delta: timedelta | None = None, scope: str = "access"
) -> str:
    """Create a signed JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "scope": scope})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_refresh_token(data: dict) -> str:
    """Create a JWT refresh token with a longer lifetime."""
    settings = get_settings()
    return create_access_token(
        data,
        expires_delta=timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES),
        scope="refresh",
    )


def token_claims(user: User) -> dict:
    return {"sub": user.id, "email": user.email, "role": user.role}


def issue_tokens(user: User) -> schemas.Token:
    claims = token_claims(user)
    return schemas.Token(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token(claims),
    )


def decode_token(token: str) -> dict:
    settings = get_settings()
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """Dependency that returns the authenticated account from a JWT token."""

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        token_data = schemas.TokenData(
            sub=payload.get("sub"), scope=payload.get("scope", "access")
        )
    except JWTError:
        raise credentials_exception
    if token_data.sub is None or token_data.scope != "access":
        raise credentials_exception
    user = crud.get_user_by_id(db, token_data.sub)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def ensure_admin_account(db: Session) -> User | None:
    """
    Create the configured bootstrap administrator if it does not exist.

    Does nothing unless both ``ADMIN_EMAIL`` and ``ADMIN_PASSWORD`` are set.
    Invalid values are logged and skipped so the application still starts.
    """
    settings = get_settings()
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        return None
    existing = crud.get_user_by_email(db, settings.ADMIN_EMAIL)
    if existing:
        return existing
    try:
        admin_in = schemas.UserCreate(
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
        )
    except ValidationError as exc:
        logger.error(
            "Bootstrap admin skipped, invalid ADMIN_* settings: %s",
            "; ".join(
                ".".join(map(str, err["loc"])) + ": " + err["msg"] for err in exc.errors()
            ),
        )
        return None
    admin = services.create_account(
        db, admin_in, get_password_hash(admin_in.password), role=ROLE_ADMIN
    )
    logger.info("Bootstrap admin account %s created", admin.email)
    return admin


@router.post(
    "/register", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED
)
def register(user_in: schemas.UserCreate, db: Session = Depends(get_db)):
    """Register a new account with the ``user`` role."""

    hashed_password = get_password_hash(user_in.password)
    return services.create_account(db, user_in, hashed_password)


@router.post("/login", response_model=schemas.Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)
):
    """Authenticate user and return access/refresh token pair."""

    user = crud.get_user_by_email(db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated"
        )
    return issue_tokens(user)


@router.post("/refresh", response_model=schemas.Token)
def refresh_tokens(payload: schemas.TokenRefresh, db: Session = Depends(get_db)):
    """Issue a new pair of tokens based on a refresh token."""

    try:
        token_data = decode_token(payload.refresh_token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )

    if token_data.get("scope") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token scope"
        )
    user = crud.get_user_by_id(db, token_data.get("sub"))
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found"
        )
    return issue_tokens(user)
