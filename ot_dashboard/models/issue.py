"""Issue and IssueNote models — problems raised against a work order."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ot_dashboard.database import Base


class Issue(Base):
    """A problem detected at a given stage of a work order.

    An optional delay window (``delay_start_date`` .. ``delay_end_date``)
    feeds the "retraso total" figure; an open-ended window counts up to
    today.

    Attributes:
        id: Primary key.
        work_order_id: FK to WorkOrder.
        stage: Stage where the problem was detected.
        title: Short summary.
        description: Detailed description.
        priority: ``"LOW"``, ``"MEDIUM"``, ``"HIGH"`` or ``"CRITICAL"``.
        status: ``"OPEN"`` or ``"RESOLVED"``.
        delay_start_date: First day of the delay caused by the issue.
        delay_end_date: Last day of the delay; ``None`` while ongoing.
        created_by: FK to the reporting user.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "issue"

    id = Column(Integer, primary_key=True, autoincrement=True)
    work_order_id = Column(
        Integer, ForeignKey("work_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stage = Column(String(100), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(20), nullable=False, default="MEDIUM")
    status = Column(String(20), nullable=False, default="OPEN", index=True)
    delay_start_date = Column(Date, nullable=True)
    delay_end_date = Column(Date, nullable=True)
    created_by = Column(Integer, ForeignKey("usuario.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    work_order = relationship("WorkOrder", back_populates="issues", lazy="select")
    notes = relationship(
        "IssueNote",
        back_populates="issue",
        order_by="IssueNote.created_at",
        lazy="select",
        cascade="all, delete-orphan",
    )


class IssueNote(Base):
    """Free-text follow-up note on an issue."""

    __tablename__ = "issue_note"

    id = Column(Integer, primary_key=True, autoincrement=True)
    issue_id = Column(
        Integer, ForeignKey("issue.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content = Column(Text, nullable=False)
    created_by = Column(Integer, ForeignKey("usuario.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    issue = relationship("Issue", back_populates="notes", lazy="select")
    usuario = relationship("Usuario", lazy="select")
