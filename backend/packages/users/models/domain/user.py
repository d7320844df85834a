from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr


class User(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    auth_subject: str
    stripe_customer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserCreateModel(BaseModel):
    """Model for creating a new user."""

    email: EmailStr
    full_name: Optional[str] = None
    auth_subject: str
    stripe_customer_id: Optional[str] = None

