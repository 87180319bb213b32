"""
Authentication Router

Account lifecycle and tokens.

Endpoints:
- POST /auth/register - Create an unverified account, email the link
- GET /auth/verify-email/{token} - Follow the emailed link
- POST /auth/login - Email + password for access/refresh tokens
- POST /auth/refresh - New access token from a refresh token
- POST /auth/logout - Clear the auth cookies
- GET /auth/me - The authenticated account

Login is refused until the email address is verified. Tokens are returned
in the body and also set as httpOnly cookies for the browser frontend.
"""

import logging
from datetime import UTC, datetime

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Request,
    Response,
    status,
)
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from mybook.config import get_settings
from mybook.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    ActiveUser,
    DbSession,
)
from mybook.models.user import User
from mybook.schemas.user import (
    MessageResponse,
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
)
from mybook.services.email import send_verification_email
from mybook.services.rate_limiter import limiter
from mybook.services.security import (
    create_access_token,
    create_refresh_token,
    generate_verification_token,
    hash_password,
    verify_password,
    verify_token_type,
)
from mybook.services.users import get_user_by_email, get_user_by_username

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        409: {"description": "Conflict (email/username already exists)"},
    },
)


def _token_data(user: User) -> dict:
    return {"sub": str(user.id), "is_admin": user.is_admin}


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str | None) -> None:
    """Set the httpOnly auth cookies read by get_current_user and /refresh."""
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )
    if refresh_token is not None:
        response.set_cookie(
            key=REFRESH_TOKEN_COOKIE,
            value=refresh_token,
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
            max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        )


# -------------------------------------------------------------------------
# Registration Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new, unverified account and email a verification link.

    Passwords need at least 8 characters with an uppercase letter, a
    digit and a symbol. Usernames start with a letter and contain only
    letters, digits and underscores; they are stored lowercase.
    """,
)
@limiter.limit("5/minute")
def register(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
    background_tasks: BackgroundTasks,
) -> UserResponse:
    """
    Create an unverified account.

    Email and username must both be free (409 otherwise). The
    verification email goes out after the response is sent; the account
    exists even if sending fails.
    """
    if get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    if get_user_by_username(db, user_data.username):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already taken",
        )

    user = User(
        email=user_data.email,
        username=user_data.username,
        hashed_password=hash_password(user_data.password),
        is_active=True,
        is_verified=False,
        verification_token=generate_verification_token(),
    )

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email or username already registered",
        ) from None
    db.refresh(user)

    background_tasks.add_task(send_verification_email, user.email, user.verification_token)

    logger.info(f"New user registered: {user.email}")

    return UserResponse.model_validate(user)


# -------------------------------------------------------------------------
# Email Verification Endpoint
# -------------------------------------------------------------------------
@router.get(
    "/verify-email/{token}",
    response_model=MessageResponse,
    summary="Verify email address",
    description="Complete registration with the token from the verification email.",
)
def verify_email(token: str, db: DbSession) -> MessageResponse:
    """
    Mark the account owning this token as verified.

    The token is single use: it is cleared once the account is verified.
    """
    user = db.execute(
        select(User).where(User.verification_token == token)
    ).scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification token",
        )

    if user.is_verified:
        user.verification_token = None
        db.commit()
        return MessageResponse(message="Email already verified")

    user.is_verified = True
    user.verification_token = None
    db.commit()

    logger.info(f"Email verified: {user.email}")
    return MessageResponse(message="Email verified successfully")


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to receive JWT tokens.

    Tokens are returned in the body and set as httpOnly cookies
    (`access_token`, `refresh_token`).

    **Note:** Use the email address in the 'username' field (OAuth2 standard).
    """,
)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    db: DbSession,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> TokenResponse:
    """
    Authenticate user and return JWT tokens.

    Uses OAuth2 password flow (form data with username/password).
    The 'username' field holds the user's email address.
    """
    email = form_data.username
    user = get_user_by_email(db, email)

    if user is None or not verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Login failed: bad credentials for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_verified:
        logger.warning(f"Login failed: unverified account {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please verify your email before logging in",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        logger.warning(f"Login failed: inactive account {email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    access_token = create_access_token(_token_data(user))
    refresh_token = create_refresh_token({"sub": str(user.id)})

    user.last_login_at = datetime.now(UTC)
    db.commit()

    _set_auth_cookies(response, access_token, refresh_token)

    logger.info(f"User logged in: {user.email}")

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


# -------------------------------------------------------------------------
# Token Refresh Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh access token",
    description="""
    Get a new access token using a refresh token, taken from the request
    body or from the `refresh_token` cookie.
    """,
)
def refresh_token(
    request: Request,
    response: Response,
    db: DbSession,
    body: RefreshTokenRequest | None = None,
) -> TokenResponse:
    """Exchange a refresh token for a new access token."""
    token = body.refresh_token if body and body.refresh_token else None
    if token is None:
        token = request.cookies.get(REFRESH_TOKEN_COOKIE)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token_type(token, "refresh")
    if payload is None or payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, int(payload["sub"]))

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    access_token = create_access_token(_token_data(user))
    _set_auth_cookies(response, access_token, None)

    logger.info(f"Token refreshed for user: {user.email}")

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


# -------------------------------------------------------------------------
# Logout Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout user",
    description="""
    Clear the auth cookies.

    **Note:** Tokens already handed out stay valid until they expire.
    """,
)
def logout(
    response: Response,
    current_user: ActiveUser,
) -> None:
    """Logout by clearing both auth cookies."""
    for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            key=key,
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
        )

    logger.info(f"User logged out: {current_user.email}")

    return None


# -------------------------------------------------------------------------
# Get Current User Endpoint
# -------------------------------------------------------------------------
@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Get the currently authenticated user's account.",
)
def get_me(current_user: ActiveUser) -> UserResponse:
    """Return the current authenticated user's account."""
    return UserResponse.model_validate(current_user)
