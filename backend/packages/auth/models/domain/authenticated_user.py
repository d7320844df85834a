from pydantic import BaseModel


class AuthenticatedUser(BaseModel):
    """Identity context passed explicitly from the auth dependency into services"""

    user_id: int
    email: str

    class Config:
        from_attributes = True
