from typing import List

from fastapi import APIRouter, Depends

from upi_sim.dependencies import get_service, unwrap
from upi_sim.schemas.records import HistoryFilter, Transaction
from upi_sim.schemas.requests import HistoryQuery
from upi_sim.services.mock_api import MockApiService

router = APIRouter()


@router.get("", response_model=List[Transaction])
async def get_transaction_history(
    query: HistoryQuery = Depends(),
    service: MockApiService = Depends(get_service),
):
    """
    List the signed-in user's transactions, newest first.

    Optional filters: type, status, start_date and end_date (inclusive).
    """
    filters = HistoryFilter(**query.model_dump())
    return unwrap(await service.get_transaction_history(filters))
