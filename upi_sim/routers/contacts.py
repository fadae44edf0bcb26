from fastapi import APIRouter, Depends

from upi_sim.dependencies import get_service, get_store, unwrap
from upi_sim.schemas.records import Beneficiary, Contact
from upi_sim.schemas.requests import AddBeneficiaryRequest, AddContactRequest
from upi_sim.services.mock_api import MockApiService
from upi_sim.store import WalletStore

router = APIRouter()


@router.post("/contacts", response_model=Contact, status_code=201)
async def add_contact(
    request: AddContactRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    contact = unwrap(await service.add_contact(**request.model_dump()))
    return store.add("contacts", contact)


@router.post("/beneficiaries", response_model=Beneficiary, status_code=201)
async def add_beneficiary(
    request: AddBeneficiaryRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    beneficiary = unwrap(await service.add_beneficiary(**request.model_dump()))
    return store.add("beneficiaries", beneficiary)
