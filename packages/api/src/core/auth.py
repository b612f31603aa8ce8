# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Kept separate from ``middleware/auth.py`` so services and tests can build
data scopes without pulling in FastAPI/Starlette.
"""

from db.enums import UserRole

from ..schemas.auth import DataScope


def build_data_scope(role: UserRole, user_id: str) -> DataScope:
    """Build data scope rules based on the user's role.

    Field officers see the applications they submitted; every approver and
    admins see the whole pipeline.
    """
    if role == UserRole.FIELD_OFFICER:
        return DataScope(own_submissions_only=True, user_id=user_id)
    return DataScope(full_pipeline=True)
