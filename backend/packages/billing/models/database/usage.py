"""
Database entity for usage events.
"""

from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    Integer,
    CheckConstraint,
)

from common.db.base import Base, BigIntegerType


class UsageEventEntity(Base):
    """
    Usage event database entity.

    Append-only ledger of credit consumption, owned by a project.
    High volume table - partitioned by created_at in production.
    """

    __tablename__ = "usage_events"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    project_id = Column(
        BigIntegerType,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    credits = Column(Integer, nullable=False)
    type = Column(
        String(50), nullable=False, index=True
    )  # api_call, content_analysis, model_training

    # Opaque caller-supplied key/values
    event_metadata = Column("metadata", JSON, nullable=False, default=dict)

    # Set by the application in UTC so day bucketing does not depend on the DB clock
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("credits >= 0", name="credits_non_negative"),
        Index("idx_usage_project_date", "project_id", "created_at"),
    )
