"""Domain models for billing plans."""

from typing import Optional
from pydantic import BaseModel


class Plan(BaseModel):
    """A plan tier: monthly price and credit allotment."""

    id: int
    name: str
    price_cents: int
    credits: int
    stripe_price_id: Optional[str] = None

    class Config:
        from_attributes = True

    @property
    def is_free(self) -> bool:
        return self.price_cents == 0


class PlanCreateModel(BaseModel):
    name: str
    price_cents: int
    credits: int
    stripe_price_id: Optional[str] = None


class PlanDefinition(BaseModel):
    """Seed definition of a catalog plan."""

    name: str
    price_cents: int
    credits: int
    description: str
    stripe_price_setting: str  # Settings attribute holding the Stripe price id
