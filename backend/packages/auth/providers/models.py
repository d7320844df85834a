from typing import Optional
from enum import Enum
from pydantic import BaseModel, EmailStr


class IdentityProvider(str, Enum):
    """Supported bearer token issuers"""

    JWT = "jwt"


class IdentityClaims(BaseModel):
    """Verified identity extracted from a bearer token"""

    subject: str  # Issuer's unique user ID (sub claim)
    email: EmailStr
    full_name: Optional[str] = None
