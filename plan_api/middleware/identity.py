from bson import ObjectId
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from plan_api.errors import UnauthorizedError


class CallerIdentityMiddleware(BaseHTTPMiddleware):
    """Attach the caller identifier asserted by the upstream authenticator.

    The header is trusted as-is. Deployments must put an authenticating proxy
    in front of this service that sets it.
    """

    def __init__(self, app, header_name: str = "x-user-id"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        request.state.user_identifier = request.headers.get(self.header_name)
        return await call_next(request)


def get_caller_id(request: Request) -> ObjectId:
    """FastAPI dependency returning the authenticated caller's ObjectId."""
    identifier = getattr(request.state, "user_identifier", None)
    if not identifier or not ObjectId.is_valid(identifier):
        raise UnauthorizedError("Authentication is required.")
    return ObjectId(identifier)
