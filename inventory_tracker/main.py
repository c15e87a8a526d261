import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inventory_tracker import __version__
from inventory_tracker.core.auth import auth_backend, fastapi_users
from inventory_tracker.core.config import settings
from inventory_tracker.core.errors import (
    DuplicateSkuError,
    InconsistentStateError,
    InfrastructureError,
    InsufficientStockError,
    InventoryError,
    StorageTimeoutError,
    UnknownLocationError,
    UnknownSkuError,
)
from inventory_tracker.db.database import async_session_maker, create_db_and_tables
from inventory_tracker.routers.audit import router as audit_router
from inventory_tracker.routers.backup import router as backup_router
from inventory_tracker.routers.bookings import router as bookings_router
from inventory_tracker.routers.items import router as items_router
from inventory_tracker.routers.locations import router as locations_router
from inventory_tracker.routers.reasons import router as reasons_router
from inventory_tracker.routers.reports import router as reports_router
from inventory_tracker.routers.stock import router as stock_router
from inventory_tracker.routers.users import router as users_router
from inventory_tracker.schemas.users import UserCreate, UserRead, UserUpdate
from inventory_tracker.services import InventoryService
from inventory_tracker.stores.sql import SqlInventoryStore

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    async with async_session_maker() as session:
        seeded = await InventoryService(SqlInventoryStore(session)).reasons.seed_defaults()
        if seeded:
            logger.info("Seeded %d default adjustment reasons", seeded)
    yield


app = FastAPI(
    title="Inventory Tracker API",
    description="Multi-location stock ledger with an append-only audit trail",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def status_for(exc: InventoryError) -> int:
    if isinstance(exc, (UnknownSkuError, UnknownLocationError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (DuplicateSkuError, InsufficientStockError)):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, StorageTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    if isinstance(exc, InfrastructureError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(exc, InconsistentStateError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    code = status_for(exc)
    if isinstance(exc, InconsistentStateError):
        logger.error("%s %s left inconsistent state: %s", request.method, request.url.path, exc, exc_info=exc)
        detail = "Stock could not be reconciled; an operator has been alerted"
    elif isinstance(exc, InfrastructureError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        detail = "Storage is temporarily unavailable, please retry"
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        detail = str(exc)
    return JSONResponse(status_code=code, content={"detail": detail})


# Authentication routes (fastapi-users)
app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/auth/jwt", tags=["auth"])
app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_reset_password_router(), prefix="/auth", tags=["auth"])
app.include_router(fastapi_users.get_verify_router(UserRead), prefix="/auth", tags=["auth"])
app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(fastapi_users.get_users_router(UserRead, UserUpdate), prefix="/users", tags=["users"])

# Inventory routes
app.include_router(items_router, prefix="/items", tags=["items"])
app.include_router(locations_router, prefix="/locations", tags=["locations"])
app.include_router(stock_router, prefix="/stock", tags=["stock"])
app.include_router(audit_router, prefix="/audit", tags=["audit"])
app.include_router(reports_router, prefix="/reports", tags=["reports"])
app.include_router(bookings_router, prefix="/bookings", tags=["bookings"])
app.include_router(reasons_router, prefix="/reasons", tags=["reasons"])
app.include_router(backup_router, prefix="/backup", tags=["backup"])

if __name__ == "__main__":
    uvicorn.run("inventory_tracker.main:app", host="0.0.0.0", port=8000, reload=True)
