import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from upi_sim import models
from upi_sim.database import SessionLocal, engine, settings
from upi_sim.demo_data import build_demo_snapshot
from upi_sim.logger import configure_structlog, get_logger
from upi_sim.store import SqlSnapshotPort, WalletStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_structlog(getattr(logging, settings.log_level, logging.INFO), settings.log_format)
    # Create tables
    models.Base.metadata.create_all(bind=engine)
    # Seed demo wallet if empty
    db = SessionLocal()
    try:
        store = WalletStore(SqlSnapshotPort(db))
        if store.is_empty:
            store.initialize(build_demo_snapshot())
    finally:
        db.close()
    logger.info("startup_complete", failure_rate=settings.failure_rate, delay_ms=[settings.min_delay_ms, settings.max_delay_ms])
    yield


app = FastAPI(
    title="UPI Wallet Simulator API",
    description="Validates UPI payment input and simulates the payments backend with realistic latency and failures",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "upi-sim-api"}


from upi_sim.routers import accounts, auth, contacts, history, payments, qr, validation  # noqa: E402
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(accounts.router, prefix="/api/v1", tags=["accounts"])
app.include_router(payments.router, prefix="/api/v1", tags=["payments"])
app.include_router(qr.router, prefix="/api/v1/qr", tags=["qr"])
app.include_router(contacts.router, prefix="/api/v1", tags=["contacts"])
app.include_router(history.router, prefix="/api/v1/transactions", tags=["history"])
app.include_router(validation.router, prefix="/api/v1/validate", tags=["validation"])
