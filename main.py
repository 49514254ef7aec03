"""
FoodHub Admin - Application Entry Point
========================================
FastAPI app initialization, exception handlers, and router registration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import settings
from common.exceptions import FoodHubError, UnauthorizedActionError
from modules.order.gateway import build_order_gateway
from modules.order.store import OrderStore
from modules.permission.resolver import PermissionPolicy
from modules.permission.roles import RoleRegistry

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("foodhub.app")


# ==========================================
# Exception handler: business errors → JSON
# ==========================================

async def business_exception_handler(request: Request, exc: FoodHubError):
    status_code = exc.status_code
    if isinstance(exc, UnauthorizedActionError) and not exc.authenticated:
        status_code = 401
    return JSONResponse({"detail": exc.message}, status_code=status_code)


# ==========================================
# Import routers
# ==========================================
from modules.admin.routes import router as admin_router
from modules.admin.role_routes import router as role_admin_router
from modules.order.admin_routes import router as order_admin_router


def _permission_policy() -> PermissionPolicy:
    try:
        return PermissionPolicy(settings.PERMISSION_POLICY)
    except ValueError:
        logger.warning(f"Unknown PERMISSION_POLICY '{settings.PERMISSION_POLICY}', using show_all_on_incomplete_data")
        return PermissionPolicy.SHOW_ALL_ON_INCOMPLETE_DATA


@asynccontextmanager
async def lifespan(app):
    if settings.ORDERS_BACKEND == "sql":
        from config.database import Base, engine
        from modules.order.models import OrderRecord  # noqa: F401
        # Auto-create any missing tables (safe for existing tables)
        Base.metadata.create_all(bind=engine)

    gateway = build_order_gateway()
    app.state.role_registry = RoleRegistry.with_defaults()
    app.state.order_store = OrderStore(gateway)
    app.state.permission_policy = _permission_policy()
    logger.info(f"Admin console started (orders backend: {gateway.name}, policy: {app.state.permission_policy.value})")

    try:
        await app.state.order_store.refresh()
    except FoodHubError as e:
        logger.warning(f"Initial order fetch failed, starting with an empty cache: {e.message}")

    yield
    await gateway.aclose()
    logger.info("Admin console stopped")


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title="FoodHub Admin",
    description="Back-office control plane: order pipeline and staff permissions",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.add_exception_handler(FoodHubError, business_exception_handler)


# ==========================================
# Register Routers
# ==========================================
app.include_router(admin_router)
app.include_router(order_admin_router)
app.include_router(role_admin_router)


# ==========================================
# Health check
# ==========================================
@app.get("/health")
async def health():
    return {"status": "ok", "version": settings.APP_VERSION}
