from fastapi import APIRouter, Depends

from upi_sim.dependencies import get_service, get_store, unwrap
from upi_sim.schemas.records import OtpAck, User
from upi_sim.schemas.requests import LoginRequest, OtpRequest
from upi_sim.services.mock_api import MockApiService
from upi_sim.store import WalletStore

router = APIRouter()


@router.post("/otp", response_model=OtpAck)
async def send_otp(request: OtpRequest, service: MockApiService = Depends(get_service)):
    return unwrap(await service.send_otp(request.phone))


@router.post("/login", response_model=User)
async def login(
    request: LoginRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    """
    Exchange a phone number and OTP for a user profile.

    The returned profile starts with setup incomplete; it becomes the
    signed-in user of the store.
    """
    user = unwrap(await service.login(request.phone, request.otp))
    store.set_user(user)
    return user
