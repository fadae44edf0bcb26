from fastapi import APIRouter, Depends

from upi_sim.dependencies import get_service, get_store, unwrap
from upi_sim.schemas.records import PaymentRequest, Recipient, Transaction
from upi_sim.schemas.requests import RequestMoneyRequest, RespondRequest, SendMoneyRequest
from upi_sim.services.mock_api import MockApiService
from upi_sim.store import WalletStore

router = APIRouter()


def _recipient(request) -> Recipient:
    return Recipient(
        type=request.recipient_type,
        value=request.recipient_value,
        name=request.recipient_name,
    )


@router.post("/payments", response_model=Transaction, status_code=201)
async def send_money(
    request: SendMoneyRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    """
    Send money to a VPA, a phone number or a scanned QR payload.

    - Form is validated before the service is called (422 on bad input)
    - 502 on simulated network failure, 400 on insufficient balance
    - The completed transaction is recorded at the top of the history
    """
    sender_account_id = request.sender_account_id
    if sender_account_id is None and store.user is not None:
        sender_account_id = store.user.default_account_id

    transaction = unwrap(await service.process_payment(
        amount=request.amount,
        recipient=_recipient(request),
        sender_account_id=sender_account_id,
        description=request.description,
    ))
    return store.add("transactions", transaction)


@router.post("/requests", response_model=PaymentRequest, status_code=201)
async def request_money(
    request: RequestMoneyRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    payment_request = unwrap(await service.request_money(
        amount=request.amount,
        recipient=_recipient(request),
        description=request.description,
    ))
    return store.add("payment_requests", payment_request)


@router.post("/requests/{request_id}/respond", response_model=PaymentRequest)
async def respond_to_payment_request(
    request_id: str,
    request: RespondRequest,
    service: MockApiService = Depends(get_service),
    store: WalletStore = Depends(get_store),
):
    answered = unwrap(await service.respond_to_payment_request(request_id, request.action))
    return store.update(
        "payment_requests",
        request_id,
        status=answered.status,
        responded_at=answered.responded_at,
    )
