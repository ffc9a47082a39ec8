from pydantic import BaseModel, Field
from typing import Any, Optional
from uuid import uuid4
from datetime import datetime, timezone


class UserCreate(BaseModel):
    # Types are loose on purpose; the rule chains in app.core.validation
    # produce the user-facing messages.
    name: Optional[Any] = None
    email: Optional[Any] = None
    password: Optional[Any] = None


class UserLogin(BaseModel):
    email: Optional[Any] = None
    password: Optional[Any] = None


class UserInDB(BaseModel):
    user_id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    email: str
    password_hash: str
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class UserPublic(BaseModel):
    user_id: str
    name: str
    email: str
    created_at: str = ""


class TokenResponse(BaseModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
