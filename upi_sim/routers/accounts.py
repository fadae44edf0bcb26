from fastapi import APIRouter, Depends, HTTPException

from upi_sim.dependencies import get_service, get_store, unwrap
from upi_sim.schemas.records import VPA, Balance, BankAccount
from upi_sim.schemas.requests import CreateVpaRequest, LinkAccountRequest
from upi_sim.services.mock_api import MockApiService
from upi_sim.store import WalletStore

router = APIRouter()


@router.post("/accounts", response_model=BankAccount, status_code=201)
async def link_bank_account(
    request: LinkAccountRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    account = unwrap(await service.link_bank_account(
        bank_name=request.bank_name,
        account_number=request.account_number,
        ifsc_code=request.ifsc_code,
        account_type=request.account_type,
        balance=request.balance,
        is_default=request.is_default,
    ))
    return store.add("accounts", account)


@router.get("/accounts/{account_id}/balance", response_model=Balance)
async def check_balance(
    account_id: str,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    if store.find("accounts", account_id) is None:
        raise HTTPException(status_code=404, detail=f"Account {account_id} not found")
    return unwrap(await service.check_balance(account_id))


@router.post("/vpas", response_model=VPA, status_code=201)
async def create_vpa(
    request: CreateVpaRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    if any(v.vpa_id.lower() == request.vpa_id.lower() for v in store.list("vpas")):
        raise HTTPException(status_code=409, detail=f"VPA {request.vpa_id} already exists")
    vpa = unwrap(await service.create_vpa(request.vpa_id))
    return store.add("vpas", vpa)
