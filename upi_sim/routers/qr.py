from fastapi import APIRouter, Depends

from upi_sim.dependencies import get_service, get_store, unwrap
from upi_sim.schemas.records import ParsedQRCode, QRCode
from upi_sim.schemas.requests import GenerateQrRequest, ParseQrRequest
from upi_sim.services.mock_api import MockApiService
from upi_sim.store import WalletStore

router = APIRouter()


@router.post("", response_model=QRCode, status_code=201)
async def generate_qr_code(
    request: GenerateQrRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    qr_code = unwrap(await service.generate_qr_code(
        request.type,
        amount=request.amount if request.type == "payment" else None,
        description=request.description if request.type == "payment" else None,
    ))
    return store.add("qr_codes", qr_code)


@router.post("/parse", response_model=ParsedQRCode)
async def parse_qr_code(request: ParseQrRequest, service: MockApiService = Depends(get_service)):
    return unwrap(await service.parse_qr_code(request.data))
