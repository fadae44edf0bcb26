"""FastAPI dependencies wiring the store and the mock service together."""
from functools import partial

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from upi_sim import database
from upi_sim.config import Settings
from upi_sim.database import get_db
from upi_sim.demo_data import DEMO_USER, DEMO_VPA
from upi_sim.schemas.results import ErrorCode, ServiceResult
from upi_sim.services.mock_api import MockApiService
from upi_sim.store import SqlSnapshotPort, WalletStore

ERROR_STATUS = {
    ErrorCode.NETWORK_ERROR: 502,
    ErrorCode.NOT_FOUND: 404,
}


def get_settings() -> Settings:
    return database.settings


def get_store(db: Session = Depends(get_db)) -> WalletStore:
    return WalletStore(SqlSnapshotPort(db))


def get_service(
    store: WalletStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> MockApiService:
    default_vpa = next((v.vpa_id for v in store.list("vpas") if v.is_default), DEMO_VPA)
    return MockApiService.from_settings(
        settings,
        profile=store.user if store.user is not None else DEMO_USER,
        profile_vpa=default_vpa,
        request_lookup=partial(store.find, "payment_requests"),
        history_source=partial(store.list, "transactions"),
    )


def unwrap(result: ServiceResult):
    """Return the payload of a successful result or raise the matching HTTPException."""
    if result.success:
        return result.data
    status_code = ERROR_STATUS.get(result.code, 400)
    raise HTTPException(
        status_code=status_code,
        detail={"code": result.code.value, "message": result.error},
    )
