"""
Database entity for catalog plans.
"""

from sqlalchemy import Column, String, Integer

from common.db.base import Base, BigIntegerType


class PlanEntity(Base):
    """Seeded plan tier. Rows are never deleted once referenced."""

    __tablename__ = "plans"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    price_cents = Column(Integer, nullable=False)
    credits = Column(Integer, nullable=False)
    stripe_price_id = Column(String(255), nullable=True, unique=True, index=True)
