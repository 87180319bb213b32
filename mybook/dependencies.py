"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Provided here:
- DbSession: per-request database session
- CurrentUser / ActiveUser / AdminUser: JWT authentication levels

Authentication:
===============
A request is authenticated by an access token sent either as
"Authorization: Bearer <token>" or as the httpOnly "access_token"
cookie set at login. The header wins when both are present.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from mybook.database import get_db
from mybook.models.user import User
from mybook.services.security import verify_token_type

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def list_favorites(db: Session = Depends(get_db)):
#
# You can write:
#   def list_favorites(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# JWT Authentication
# =============================================================================
# auto_error=False so a missing header can fall back to the cookie.
# tokenUrl drives the "Authorize" button in Swagger UI.

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False,
)


def get_request_token(
    request: Request,
    bearer_token: str | None = Depends(oauth2_scheme),
) -> str | None:
    """Access token from the Authorization header or the access_token cookie."""
    return bearer_token or request.cookies.get(ACCESS_TOKEN_COOKIE)


def get_current_user(
    db: DbSession,
    token: str | None = Depends(get_request_token),
) -> User:
    """
    Extract and validate the current user from the access token.

    This dependency:
    1. Reads the token from the header or cookie
    2. Decodes and validates the JWT
    3. Looks up the user in the database

    Raises:
        HTTPException: 401 if the token is missing or invalid or the user is gone
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token_type(token, "access")
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    user = db.get(User, int(user_id))
    if user is None:
        raise credentials_exception

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verify the current user is active.

    Raises:
        HTTPException: 403 if the account is inactive
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return current_user


def get_current_admin(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """
    Verify the current user is an admin.

    The is_admin flag is read from the database, not from the token claim.

    Raises:
        HTTPException: 403 if the user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


# Type aliases for cleaner route signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
ActiveUser = Annotated[User, Depends(get_current_active_user)]
AdminUser = Annotated[User, Depends(get_current_admin)]
