# expense_tracker/api/v1/deps.py
from fastapi import Path

from expense_tracker.db.database import get_async_db # noqa: F401  re-exported for the endpoints


async def get_user_id(
    user_id: str = Path(..., min_length=1, max_length=255, description="Opaque user id issued by the identity provider")
) -> str:
    """
    Identity boundary: the authenticated user id arrives already issued,
    the service only uses it as a partition key.
    """
    return user_id
