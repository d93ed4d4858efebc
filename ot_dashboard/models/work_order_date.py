"""WorkOrderDate model — planned or confirmed date of one stage."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ot_dashboard.database import Base


class WorkOrderDate(Base):
    """Date of a stage checkpoint for a work order.

    There is at most one row per ``(work_order_id, stage)``; the service
    upserts into it instead of inserting duplicates.

    Attributes:
        id: Primary key.
        work_order_id: FK to WorkOrder.
        stage: Stage name from the INCO or ANTI sequence.
        date: Scheduled or actual date; ``None`` when not yet scheduled.
        confirmed: ``True`` once the checkpoint has actually been reached.
    """

    __tablename__ = "work_order_date"
    __table_args__ = (
        UniqueConstraint("work_order_id", "stage", name="uq_work_order_date_stage"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    work_order_id = Column(
        Integer, ForeignKey("work_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stage = Column(String(100), nullable=False)
    date = Column(Date, nullable=True)
    confirmed = Column(Boolean, nullable=False, default=False)
    created_by = Column(Integer, ForeignKey("usuario.id", ondelete="SET NULL"), nullable=True)
    updated_by = Column(Integer, ForeignKey("usuario.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    work_order = relationship("WorkOrder", back_populates="dates", lazy="select")
