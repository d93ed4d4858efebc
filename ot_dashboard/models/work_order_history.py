"""WorkOrderHistory model — audit trail of work-order field changes."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ot_dashboard.database import Base


class WorkOrderHistory(Base):
    """One changed field of a work order.

    ``field`` is either a stage name (date changes) or one of ``status``,
    ``progress``, ``location``, ``priority``.

    Attributes:
        id: Primary key.
        work_order_id: FK to WorkOrder.
        field: Name of the changed field or stage.
        old_value: Previous value rendered as text (nullable).
        new_value: New value rendered as text.
        changed_by: FK to the user who made the change.
        changed_at: When the change happened.
    """

    __tablename__ = "work_order_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    work_order_id = Column(
        Integer, ForeignKey("work_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field = Column(String(100), nullable=False)
    old_value = Column(String(200), nullable=True)
    new_value = Column(String(200), nullable=True)
    changed_by = Column(Integer, ForeignKey("usuario.id", ondelete="SET NULL"), nullable=True)
    changed_at = Column(DateTime, default=func.now(), nullable=False, index=True)

    # Relationships
    work_order = relationship("WorkOrder", back_populates="history", lazy="select")
    usuario = relationship("Usuario", lazy="select")
