"""
UserHub Backend — Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the API contract between clients and backend.
How:   FastAPI validates request bodies against these models; the service maps
       ORM rows to UserResponse; every payload is wrapped in an Envelope.
Who:   Used by route handlers, the service layer and the OpenAPI docs.

Design Decision:
    Schemas are separate from the SQLAlchemy model: `age`, `id` and
    `timestamp` exist on responses only, and are ignored if a client
    sends them in a request body.
"""

from datetime import date, datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, EmailStr, Field, field_validator

from userhub.models.user import DEFAULT_ROLE, Role

T = TypeVar("T")


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(BaseModel):
    """
    What:  Body of POST /users.
    Rules: non-empty name, syntactically valid email, role from the fixed set
           (defaults to 'user' when omitted or blank), birth date not in the future.
    """
    name: str = Field(min_length=1, description="Display name (non-empty)")
    email: EmailStr = Field(description="Email address, unique across users")
    role: Role = Field(default=DEFAULT_ROLE, description="admin, user or moderator")
    birth: date = Field(description="Date of birth (ISO 8601 date)")

    model_config = {
        "str_strip_whitespace": True,
        "extra": "ignore",  # id, age and timestamp are store-owned
    }

    @field_validator("role", mode="before")
    @classmethod
    def default_blank_role(cls, v):
        """Treats a missing/blank role as the default and matches case-insensitively."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_ROLE
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("birth")
    @classmethod
    def birth_not_in_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("birth cannot be in the future")
        return v


class UserUpdate(UserCreate):
    """
    What:  Body of PUT /users/{id}: a full replacement of every mutable field.
    """


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """Full representation of a stored user, including store-owned fields."""
    id: int = Field(description="Store-assigned identifier")
    name: str
    email: str
    role: str
    birth: date
    age: int = Field(description="Whole years since birth, computed at read time")
    timestamp: datetime = Field(description="When the user was created")

    model_config = {"from_attributes": True}


class Envelope(BaseModel, Generic[T]):
    """
    Uniform wrapper for every API response, success or failure.

    Contract:
        success=False implies data=None
        code mirrors the HTTP status of the transport
    """
    success: bool
    code: int
    message: str
    data: Optional[T] = None


UserEnvelope = Envelope[UserResponse]
UserListEnvelope = Envelope[List[UserResponse]]
EmptyEnvelope = Envelope[None]
