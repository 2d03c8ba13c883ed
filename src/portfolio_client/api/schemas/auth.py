"""Pydantic schemas for session endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    model_config = {"from_attributes": True}

    user_id: Optional[str] = None
    email: Optional[str] = None
    is_authenticated: bool
