"""SQLAlchemy models package for the Tablero de OTs.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.
The import order follows the foreign-key dependency graph so that parent
tables are always registered before their children.

Usage from other modules:
    from ot_dashboard.models import WorkOrder, WorkOrderDate
"""

# Users (referenced by every audit column)
from ot_dashboard.models.usuario import Usuario  # noqa: F401

# Work orders and their stage checkpoints
from ot_dashboard.models.work_order import WorkOrder  # noqa: F401
from ot_dashboard.models.work_order_date import WorkOrderDate  # noqa: F401
from ot_dashboard.models.work_order_history import WorkOrderHistory  # noqa: F401

# Problems and follow-up notes
from ot_dashboard.models.issue import Issue, IssueNote  # noqa: F401

__all__ = [
    "Usuario",
    "WorkOrder",
    "WorkOrderDate",
    "WorkOrderHistory",
    "Issue",
    "IssueNote",
]
