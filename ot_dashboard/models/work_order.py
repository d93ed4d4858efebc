"""WorkOrder model — one physical item moving through INCO / ANTI."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ot_dashboard.database import Base


class WorkOrder(Base):
    """A work order (OT) tracked from reception until dispatch.

    ``status``, ``progress`` and ``location`` are derived by the stage
    resolver every time a stage date is written; they are frozen once the
    order reaches ``ARCHIVED``.

    Attributes:
        id: Primary key.
        ot: Human-facing order number, unique.
        client: Client name.
        description: Free-text description of the job.
        tag: Equipment tag.
        location: ``"INCO"``, ``"ANTI"`` or ``"ARCHIVED"``.
        status: Name of the last confirmed stage, or ``"Sin iniciar"``.
        progress: Integer percent reached by the last confirmed stage.
        priority: Priority flag shown first on the board.
        created_by: FK to the user who created the order.
        updated_by: FK to the user who last modified the order.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "work_order"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ot = Column(String(50), unique=True, nullable=False, index=True)
    client = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    tag = Column(String(100), nullable=True)
    location = Column(String(20), nullable=False, default="INCO", index=True)
    # "INCO", "ANTI", "ARCHIVED"
    status = Column(String(100), nullable=False, default="Sin iniciar")
    progress = Column(Integer, nullable=False, default=0)
    priority = Column(Boolean, nullable=False, default=False)
    created_by = Column(Integer, ForeignKey("usuario.id", ondelete="SET NULL"), nullable=True)
    updated_by = Column(Integer, ForeignKey("usuario.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    dates = relationship(
        "WorkOrderDate",
        back_populates="work_order",
        lazy="select",
        cascade="all, delete-orphan",
    )
    history = relationship(
        "WorkOrderHistory",
        back_populates="work_order",
        order_by="WorkOrderHistory.changed_at.desc()",
        lazy="select",
        cascade="all, delete-orphan",
    )
    issues = relationship(
        "Issue",
        back_populates="work_order",
        order_by="Issue.created_at.desc()",
        lazy="select",
        cascade="all, delete-orphan",
    )
