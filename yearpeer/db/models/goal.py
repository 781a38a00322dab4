"""Goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from yearpeer.db.base import Base


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (
        Index("ix_goals_user_id", "user_id"),
        Index("ix_goals_user_id_start_date", "user_id", "start_date"),
        CheckConstraint("end_date >= start_date", name="ck_goals_date_order"),
        CheckConstraint("impact BETWEEN 1 AND 5", name="ck_goals_impact_range"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(length=255), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(length=7), nullable=False)
    impact = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Deleting a goal detaches its tasks; the FK does the same at the database level.
    tasks = relationship(
        "Task",
        back_populates="goal",
        order_by="Task.date",
        passive_deletes=True,
    )
