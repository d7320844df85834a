from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr

from packages.billing.models.schemas.billing import SubscriptionResponse


class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    created_at: datetime
    subscription: Optional[SubscriptionResponse] = None
