from fastapi import Depends, FastAPI

from plan_api.config import settings, logger
from plan_api.database import client, db, ensure_indexes
from plan_api.errors import register_error_handlers
from plan_api.middleware.identity import CallerIdentityMiddleware
from plan_api.middleware.request_id import RequestIdMiddleware
from plan_api.middleware.require_role import require_role
from plan_api.routes import health, plan


# -------------------------
# App Initialization
# -------------------------
app = FastAPI(title="Plan API")


# -------------------------
# Middleware
# -------------------------
app.add_middleware(CallerIdentityMiddleware, header_name=settings.IDENTITY_HEADER)
app.add_middleware(RequestIdMiddleware)

register_error_handlers(app)


# -------------------------
# Include Routes
# -------------------------
def plan_router_dependencies(required_role=None):
    if not required_role:
        return []
    return [Depends(require_role(required_role))]


app.include_router(health.router)
app.include_router(plan.router, dependencies=plan_router_dependencies(settings.PLANS_REQUIRED_ROLE))


@app.on_event("startup")
async def startup_event():
    logger.info("Application started")
    await ensure_indexes(db)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down")
    client.close()
