"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr


class UserOut(BaseModel):
    user_id: str
    name: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}
