"""
User Pydantic Schemas

These schemas define the shape of data for User-related API operations.

Schemas:
- UserCreate: Registration data (email, username, password)
- UserUpdate: Profile update fields
- UserResponse: The caller's own account data (never exposes password)
- UserPublicResponse: What other users can see
- UserProfileResponse / UserSearchResult: Public data plus shelf counts
- PasswordChange, TokenResponse, RefreshTokenRequest, MessageResponse

Pydantic v2 Features Used:
- model_config: Configure model behavior
- Field(): Define constraints and metadata
- field_validator: Validate and transform field values
- EmailStr: Built-in email validation
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")


def validate_password_strength(v: str) -> str:
    """
    Shared password rule for registration and password change.

    Requirements:
    - At least 8 characters (enforced by min_length)
    - At least 1 uppercase letter
    - At least 1 number
    - At least 1 symbol
    """
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"\d", v):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[^A-Za-z0-9]", v):
        raise ValueError("Password must contain at least one symbol")
    return v


def validate_username(v: str) -> str:
    """Usernames start with a letter and use letters, digits and underscores."""
    if not USERNAME_PATTERN.match(v):
        raise ValueError(
            "Username must start with a letter and contain only "
            "letters, numbers, and underscores"
        )
    return v.lower()


class UserBase(BaseModel):
    """Shared user fields."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["reader@example.com"],
    )

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Unique username (3-50 characters, alphanumeric and underscores)",
        examples=["bookworm", "jane_reads"],
    )

    @field_validator("email")
    @classmethod
    def email_to_lowercase(cls, v: str) -> str:
        return v.lower()

    @field_validator("username")
    @classmethod
    def username_must_be_valid(cls, v: str) -> str:
        return validate_username(v)


class UserCreate(UserBase):
    """
    Schema for user registration.

    Requires email, username, and password with strength validation.
    """

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (min 8 chars with an uppercase letter, a number and a symbol)",
        examples=["SecurePass123!"],
    )

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v: str) -> str:
        return validate_password_strength(v)


class UserUpdate(BaseModel):
    """
    Schema for updating the caller's profile.

    All fields are optional for partial updates. Email changes are not
    supported; avatars go through the upload endpoint.
    """

    username: str | None = Field(
        default=None,
        min_length=3,
        max_length=50,
        description="New username",
    )

    bio: str | None = Field(
        default=None,
        max_length=500,
        description="User biography",
    )

    @field_validator("username")
    @classmethod
    def username_must_be_valid(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return validate_username(v)


class UserResponse(BaseModel):
    """
    The authenticated user's own account.

    SECURITY: Never includes password, verification token or other
    internal fields.
    """

    id: int = Field(..., description="Unique user identifier", examples=[1, 42])
    email: EmailStr = Field(..., description="User's email address")
    username: str = Field(..., description="Unique username")
    bio: str | None = Field(default=None, description="User biography")
    avatar_url: str | None = Field(default=None, description="Path to avatar image")
    is_active: bool = Field(..., description="Whether the account is active")
    is_verified: bool = Field(..., description="Whether email has been verified")
    is_admin: bool = Field(default=False, description="Whether the user is an admin")
    created_at: datetime = Field(..., description="When the user registered")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "email": "reader@example.com",
                "username": "bookworm",
                "bio": "Mostly science fiction",
                "avatar_url": "/uploads/avatars/avatar-3f9c1e.png",
                "is_active": True,
                "is_verified": True,
                "is_admin": False,
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class UserPublicResponse(BaseModel):
    """
    Public user data (visible to other users).

    Excludes email and account status fields.
    """

    id: int = Field(..., description="Unique user identifier")
    username: str = Field(..., description="Unique username")
    avatar_url: str | None = Field(default=None, description="Path to avatar image")
    bio: str | None = Field(default=None, description="User biography")

    model_config = ConfigDict(from_attributes=True)


class UserSearchResult(UserPublicResponse):
    """A user in search results or suggestions, with shelf counts."""

    books_read_count: int = Field(default=0, ge=0, description="Books marked as read")
    favorite_books_count: int = Field(default=0, ge=0, description="Favorite books")


class UserProfileResponse(UserSearchResult):
    """Public profile page of a user."""

    reviews_count: int = Field(default=0, ge=0, description="Reviews written")
    created_at: datetime = Field(..., description="When the user joined")


class PasswordChange(BaseModel):
    """Schema for password change request."""

    current_password: str = Field(
        ...,
        min_length=1,
        description="Current password for verification",
    )

    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password",
    )

    @field_validator("new_password")
    @classmethod
    def password_must_be_strong(cls, v: str) -> str:
        return validate_password_strength(v)


# =============================================================================
# Token Schemas
# =============================================================================


class TokenResponse(BaseModel):
    """
    Tokens returned by login and refresh.

    Both tokens are also set as httpOnly cookies; browser clients can
    ignore the body.
    """

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str | None = Field(default=None, description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class RefreshTokenRequest(BaseModel):
    """Optional body for /auth/refresh when the cookie is not available."""

    refresh_token: str | None = Field(default=None, description="JWT refresh token")


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
