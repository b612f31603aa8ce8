# This project was developed with assistance from AI tools.
"""Shared data scope filtering for service queries.

Centralizes the DataScope -> SQL WHERE logic so that each resource service
applies the same rules.
"""

from db import LoanApplication

from ..schemas.auth import DataScope, UserContext


def apply_data_scope(stmt, scope: DataScope, user: UserContext, *, model=LoanApplication):
    """Apply data scope filtering to a SQLAlchemy query.

    Args:
        stmt: A SQLAlchemy select statement.
        scope: The caller's DataScope.
        user: The caller's UserContext.
        model: The mapped class whose ``created_by`` column owns the row
            (``LoanApplication`` or ``Client``).

    Returns:
        The filtered statement.
    """
    if scope.full_pipeline:
        return stmt
    if scope.own_submissions_only and scope.user_id:
        return stmt.where(model.created_by == scope.user_id)
    # No recognized scope -- match nothing rather than everything.
    return stmt.where(model.id.is_(None))
