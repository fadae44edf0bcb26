"""
Simulated UPI backend.

Every operation behaves like a remote call:
1. wait a random 300-1200ms (injected sleep, injected rng)
2. fail ~5% of the time with a generic network error, before any business rule
3. apply the operation's business rules and build a fresh record

Nothing is raised for expected failures; callers branch on ServiceResult.success.
The service keeps no domain state of its own. Lookups that need caller data
(pending payment requests, transaction history) go through injected callables.
"""
import asyncio
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs, quote

from upi_sim.demo_data import DEMO_INCOMING_REQUEST, DEMO_USER, DEMO_VPA, demo_transactions
from upi_sim.formatters import (
    generate_reference_id,
    generate_upi_reference_id,
    mask_account_number,
    mask_phone_number,
)
from upi_sim.logger import get_logger
from upi_sim.schemas.records import (
    VPA,
    Balance,
    BankAccount,
    Beneficiary,
    Contact,
    HistoryFilter,
    OtpAck,
    ParsedQRCode,
    PaymentRequest,
    QRCode,
    Recipient,
    Transaction,
    User,
    to_money,
)
from upi_sim.schemas.results import ErrorCode, ServiceResult, ValidationResult
from upi_sim.services.ids import generate_id
from upi_sim.validators import validate_amount

logger = get_logger(__name__)

UPI_SCHEME = "upi://"
REQUEST_TTL = timedelta(days=7)
PAYMENT_QR_TTL = timedelta(hours=24)

FAILURE_MESSAGES = {
    "send_otp": "Failed to send OTP. Please try again.",
    "login": "Network error. Please try again.",
    "link_bank_account": "Failed to link bank account. Please try again.",
    "create_vpa": "Failed to create VPA. Please try again.",
    "process_payment": "Payment failed. Please try again.",
    "request_money": "Failed to send money request. Please try again.",
    "generate_qr_code": "Failed to generate QR code. Please try again.",
    "parse_qr_code": "Failed to parse QR code. Please try again.",
    "add_contact": "Failed to add contact. Please try again.",
    "add_beneficiary": "Failed to add beneficiary. Please try again.",
    "respond_to_payment_request": "Failed to process request. Please try again.",
    "check_balance": "Failed to fetch balance. Please try again.",
    "get_transaction_history": "Failed to fetch transaction history. Please try again.",
}

RESPONSE_STATUS = {
    "accept": "accepted",
    "decline": "declined",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def build_upi_uri(vpa: str, amount=None, description: Optional[str] = None) -> str:
    """upi://<vpa> or upi://<vpa>?am=<amount>&tn=<url-encoded note>"""
    params = []
    if amount is not None:
        params.append(f"am={_to_decimal(amount)}")
    if description:
        params.append(f"tn={quote(description, safe='')}")
    uri = f"{UPI_SCHEME}{vpa}"
    return f"{uri}?{'&'.join(params)}" if params else uri


def decode_upi_uri(data: str) -> ParsedQRCode:
    """
    Decode a upi:// payload.

    Accepts upi://<vpa>?am=..&tn=.. and the upi://pay?pa=<vpa>&pn=<name>&am=..
    form. The code is a payment code iff it carries an `am` parameter.

    Raises:
        ValueError: if the scheme is wrong or `am` is not a number
    """
    if not data.startswith(UPI_SCHEME):
        raise ValueError("Invalid QR code format.")

    target, _, query = data[len(UPI_SCHEME):].partition("?")
    params = parse_qs(query, keep_blank_values=True)

    def first(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    recipient = first("pa") or (target if target and target.lower() != "pay" else None)

    amount = None
    raw_amount = first("am")
    if raw_amount:
        try:
            amount = Decimal(raw_amount)
        except InvalidOperation:
            raise ValueError("Invalid amount in QR code.")
        if not amount.is_finite():
            raise ValueError("Invalid amount in QR code.")

    return ParsedQRCode(
        type="payment" if "am" in params else "personal",
        amount=amount,
        description=first("tn") or None,
        recipient=recipient or None,
        payee_name=first("pn") or None,
    )


def malformed_amount(amount) -> Optional[ValidationResult]:
    """The failing check for an amount that is not a positive 2dp number; None when well formed."""
    result = validate_amount(str(amount), max_amount=Decimal("Infinity"))
    return None if result.is_valid else result


def apply_history_filter(
    transactions: Iterable[Transaction],
    filters: Optional[HistoryFilter],
) -> List[Transaction]:
    """Filter by type, status and an inclusive date range; newest first."""
    selected = []
    for txn in transactions:
        if filters is not None:
            if filters.type and txn.type != filters.type:
                continue
            if filters.status and txn.status != filters.status:
                continue
            stamp = _as_utc(txn.timestamp)
            if filters.start_date and stamp < _as_utc(filters.start_date):
                continue
            if filters.end_date and stamp > _as_utc(filters.end_date):
                continue
        selected.append(txn)
    selected.sort(key=lambda t: _as_utc(t.timestamp), reverse=True)
    return selected


class MockApiService:
    """Stand-in for the payments backend."""

    def __init__(
        self,
        failure_rate: float = 0.05,
        delay_range: Tuple[float, float] = (0.3, 1.2),
        demo_otp: str = "123456",
        max_amount: int = 100_000,
        balance: Decimal = Decimal("125000.50"),
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[str], str] = generate_id,
        profile: User = DEMO_USER,
        profile_vpa: str = DEMO_VPA,
        request_lookup: Optional[Callable[[str], Optional[PaymentRequest]]] = None,
        history_source: Optional[Callable[[], List[Transaction]]] = None,
    ):
        """
        Args:
            failure_rate: Probability of the simulated network failure per call
            delay_range: (min, max) latency in seconds
            demo_otp: The only OTP login accepts
            max_amount: Payments above this fail with insufficient balance
            balance: Figure returned by check_balance
            rng: Random source for latency, failure rolls and reference ids
            sleep: Awaitable used to wait out the latency
            clock: Returns the current aware UTC datetime
            id_factory: Mints record ids from a prefix
            profile: Identity used for records the demo user owns
            profile_vpa: VPA printed on QR codes and outgoing records
            request_lookup: Finds a payment request by id; None uses the demo record
            history_source: Returns the transactions to filter; None uses demo data
        """
        self._failure_rate = failure_rate
        self._delay_range = delay_range
        self._demo_otp = demo_otp
        self._max_amount = Decimal(max_amount)
        self._balance = _to_decimal(balance)
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock
        self._id_factory = id_factory
        self._profile = profile
        self._profile_vpa = profile_vpa
        self._request_lookup = request_lookup
        self._history_source = history_source

    @classmethod
    def from_settings(cls, settings, **overrides) -> "MockApiService":
        options = dict(
            failure_rate=settings.failure_rate,
            delay_range=settings.delay_range,
            demo_otp=settings.demo_otp,
            max_amount=settings.max_amount,
            balance=Decimal(settings.demo_balance),
        )
        options.update(overrides)
        return cls(**options)

    async def _simulate_network(self, operation: str) -> Optional[ServiceResult]:
        """Wait out the latency, then roll for a network failure."""
        await self._sleep(self._rng.uniform(*self._delay_range))
        if self._rng.random() < self._failure_rate:
            logger.warning("simulated_network_failure", operation=operation)
            return ServiceResult.fail(FAILURE_MESSAGES[operation], ErrorCode.NETWORK_ERROR)
        return None

    # Authentication

    async def send_otp(self, phone: str) -> ServiceResult[OtpAck]:
        failure = await self._simulate_network("send_otp")
        if failure:
            return failure

        logger.info("otp_sent", phone=mask_phone_number(phone))
        return ServiceResult.ok(OtpAck(message="OTP sent successfully"))

    async def login(self, phone: str, otp: str) -> ServiceResult[User]:
        failure = await self._simulate_network("login")
        if failure:
            return failure

        if otp != self._demo_otp:
            logger.info("login_rejected", phone=mask_phone_number(phone), reason="invalid_otp")
            return ServiceResult.fail("Invalid OTP. Please try again.", ErrorCode.INVALID_OTP)

        user = self._profile.model_copy(update={
            "phone": phone,
            "is_setup_complete": False,
            "default_account_id": None,
            "theme": "system",
            "notifications": True,
        })
        logger.info("login_succeeded", user_id=user.id)
        return ServiceResult.ok(user)

    # Accounts and addresses

    async def link_bank_account(
        self,
        bank_name: str,
        account_number: str,
        ifsc_code: str,
        account_type: str = "savings",
        balance=0,
        is_default: bool = False,
    ) -> ServiceResult[BankAccount]:
        failure = await self._simulate_network("link_bank_account")
        if failure:
            return failure

        try:
            balance = to_money(balance)
        except ValueError:
            balance = None
        if balance is None or balance < 0:
            return ServiceResult.fail("Invalid account balance.", ErrorCode.FORMAT_ERROR)

        account = BankAccount(
            id=self._id_factory("acc"),
            user_id=self._profile.id,
            bank_name=bank_name,
            account_number=account_number,
            ifsc_code=ifsc_code,
            account_type=account_type,
            balance=balance,
            is_default=is_default,
            is_active=True,
            created_at=self._clock(),
        )
        logger.info("bank_account_linked", account_id=account.id,
                    account_number=mask_account_number(account_number))
        return ServiceResult.ok(account)

    async def create_vpa(self, vpa_id: str) -> ServiceResult[VPA]:
        failure = await self._simulate_network("create_vpa")
        if failure:
            return failure

        vpa = VPA(
            id=self._id_factory("vpa"),
            user_id=self._profile.id,
            vpa_id=vpa_id,
            is_default=False,
            is_active=True,
            created_at=self._clock(),
        )
        return ServiceResult.ok(vpa)

    # Payments

    async def process_payment(
        self,
        amount,
        recipient: Recipient,
        sender_account_id: str,
        description: Optional[str] = None,
    ) -> ServiceResult[Transaction]:
        failure = await self._simulate_network("process_payment")
        if failure:
            return failure

        invalid = malformed_amount(amount)
        if invalid:
            return ServiceResult.fail(invalid.error, invalid.code)

        amount = _to_decimal(amount)
        if amount > self._max_amount:
            logger.info("payment_rejected", reason="insufficient_balance", amount=str(amount))
            return ServiceResult.fail(
                "Insufficient balance in your account.", ErrorCode.INSUFFICIENT_BALANCE
            )

        receiver_vpa = receiver_phone = None
        if recipient.type == "vpa":
            receiver_vpa = recipient.value
        elif recipient.type == "phone":
            receiver_phone = recipient.value
        else:
            try:
                receiver_vpa = decode_upi_uri(recipient.value).recipient
            except ValueError:
                receiver_vpa = None

        now = self._clock()
        transaction = Transaction(
            id=self._id_factory("txn"),
            user_id=self._profile.id,
            type="pay",
            status="success",
            amount=amount,
            currency="INR",
            description=description,
            reference_id=generate_reference_id(self._rng),
            upi_reference_id=generate_upi_reference_id(self._rng),
            sender_vpa=self._profile_vpa,
            receiver_vpa=receiver_vpa,
            receiver_phone=receiver_phone,
            sender_account_id=sender_account_id,
            timestamp=now,
            completed_at=now,
        )
        logger.info("payment_processed", transaction_id=transaction.id, amount=str(transaction.amount))
        return ServiceResult.ok(transaction)

    async def request_money(
        self,
        amount,
        recipient: Recipient,
        description: Optional[str] = None,
    ) -> ServiceResult[PaymentRequest]:
        failure = await self._simulate_network("request_money")
        if failure:
            return failure

        invalid = malformed_amount(amount)
        if invalid:
            return ServiceResult.fail(invalid.error, invalid.code)

        now = self._clock()
        request = PaymentRequest(
            id=self._id_factory("req"),
            user_id=self._profile.id,
            requester_id=self._profile.id,
            requester_name=self._profile.name,
            requester_vpa=self._profile_vpa,
            amount=amount,
            currency="INR",
            description=description,
            status="pending",
            expires_at=now + REQUEST_TTL,
            created_at=now,
        )
        logger.info("money_requested", request_id=request.id, recipient_type=recipient.type)
        return ServiceResult.ok(request)

    async def respond_to_payment_request(self, request_id: str, action: str) -> ServiceResult[PaymentRequest]:
        """
        Accept or decline an incoming payment request.

        With a request_lookup the request is resolved by id and must still be
        pending and unexpired. Without one, the demo request is answered under
        the given id.

        Raises:
            ValueError: if action is not "accept" or "decline"
        """
        if action not in RESPONSE_STATUS:
            raise ValueError(f"Unknown action: {action}")

        failure = await self._simulate_network("respond_to_payment_request")
        if failure:
            return failure

        now = self._clock()
        if self._request_lookup is None:
            request = DEMO_INCOMING_REQUEST.model_copy(update={
                "id": request_id,
                "created_at": now,
                "expires_at": now + REQUEST_TTL,
            })
        else:
            request = self._request_lookup(request_id)
            if request is None:
                return ServiceResult.fail("Payment request not found.", ErrorCode.NOT_FOUND)
            if request.is_expired(now):
                return ServiceResult.fail("This payment request has expired.", ErrorCode.EXPIRED)
            if request.status != "pending":
                return ServiceResult.fail(
                    f"This payment request was already {request.status}.",
                    ErrorCode.ALREADY_RESPONDED,
                )

        responded = request.model_copy(update={
            "status": RESPONSE_STATUS[action],
            "responded_at": now,
        })
        logger.info("payment_request_answered", request_id=request_id, status=responded.status)
        return ServiceResult.ok(responded)

    # QR codes

    async def generate_qr_code(
        self,
        type: str,
        amount=None,
        description: Optional[str] = None,
    ) -> ServiceResult[QRCode]:
        failure = await self._simulate_network("generate_qr_code")
        if failure:
            return failure

        if amount is not None:
            invalid = malformed_amount(amount)
            if invalid:
                return ServiceResult.fail(invalid.error, invalid.code)

        now = self._clock()
        if type == "personal":
            data = build_upi_uri(self._profile_vpa)
            expires_at = None
        else:
            data = build_upi_uri(self._profile_vpa, amount, description)
            expires_at = now + PAYMENT_QR_TTL

        qr_code = QRCode(
            id=self._id_factory("qr"),
            user_id=self._profile.id,
            type=type,
            data=data,
            amount=_to_decimal(amount) if amount is not None else None,
            description=description,
            is_active=True,
            created_at=now,
            expires_at=expires_at,
        )
        return ServiceResult.ok(qr_code)

    async def parse_qr_code(self, data: str) -> ServiceResult[ParsedQRCode]:
        failure = await self._simulate_network("parse_qr_code")
        if failure:
            return failure

        try:
            parsed = decode_upi_uri(data)
        except ValueError as e:
            return ServiceResult.fail(str(e), ErrorCode.FORMAT_ERROR)
        return ServiceResult.ok(parsed)

    # Contacts and beneficiaries

    async def add_contact(
        self,
        name: str,
        phone: str,
        email: Optional[str] = None,
        avatar: Optional[str] = None,
        is_favorite: bool = False,
    ) -> ServiceResult[Contact]:
        failure = await self._simulate_network("add_contact")
        if failure:
            return failure

        contact = Contact(
            id=self._id_factory("contact"),
            user_id=self._profile.id,
            name=name,
            phone=phone,
            email=email,
            avatar=avatar,
            is_favorite=is_favorite,
            created_at=self._clock(),
        )
        return ServiceResult.ok(contact)

    async def add_beneficiary(
        self,
        name: str,
        vpa_id: Optional[str] = None,
        phone: Optional[str] = None,
        account_number: Optional[str] = None,
        ifsc_code: Optional[str] = None,
        bank_name: Optional[str] = None,
        is_favorite: bool = False,
    ) -> ServiceResult[Beneficiary]:
        failure = await self._simulate_network("add_beneficiary")
        if failure:
            return failure

        now = self._clock()
        beneficiary = Beneficiary(
            id=self._id_factory("ben"),
            user_id=self._profile.id,
            name=name,
            vpa_id=vpa_id,
            phone=phone,
            account_number=account_number,
            ifsc_code=ifsc_code,
            bank_name=bank_name,
            is_favorite=is_favorite,
            last_used=now,
            created_at=now,
        )
        if not beneficiary.has_payment_method:
            logger.warning("beneficiary_without_payment_method", beneficiary_id=beneficiary.id)
        return ServiceResult.ok(beneficiary)

    # Queries

    async def check_balance(self, account_id: str) -> ServiceResult[Balance]:
        failure = await self._simulate_network("check_balance")
        if failure:
            return failure

        return ServiceResult.ok(Balance(account_id=account_id, balance=self._balance))

    async def get_transaction_history(
        self,
        filters: Optional[HistoryFilter] = None,
    ) -> ServiceResult[List[Transaction]]:
        failure = await self._simulate_network("get_transaction_history")
        if failure:
            return failure

        source = self._history_source() if self._history_source else demo_transactions()
        return ServiceResult.ok(apply_history_filter(source, filters))
