from bson import ObjectId
from fastapi import Depends

from plan_api.config import logger
from plan_api.database import get_db
from plan_api.errors import ForbiddenError
from plan_api.middleware.identity import get_caller_id

FORBIDDEN_MESSAGE = "The requested resource is forbidden."


def require_role(role: str):
    """Build a dependency that lets through only callers holding ``role``.

    The caller is looked up on every request. A caller whose user record no
    longer exists is refused like any other mismatch. Store errors propagate.
    """

    async def dependency(
        caller_id: ObjectId = Depends(get_caller_id),
        db=Depends(get_db),
    ) -> None:
        user = await db.users.find_one({"_id": caller_id})
        if user is None or user.get("role") != role:
            logger.warning("User %s denied; required role %r", caller_id, role)
            raise ForbiddenError(FORBIDDEN_MESSAGE)

    return dependency
