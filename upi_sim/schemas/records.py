"""
Value records exchanged between callers and the mock service.

All records are frozen; an update is a new record built with
`record.model_copy(update={...})`.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Theme = Literal["light", "dark", "system"]
AccountType = Literal["savings", "current"]
TransactionType = Literal["pay", "request", "collect"]
TransactionStatus = Literal["pending", "success", "failed"]
RequestStatus = Literal["pending", "accepted", "declined", "expired"]
QRType = Literal["personal", "payment"]
RecipientType = Literal["vpa", "phone", "qr"]

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """
    Coerce a number or numeric string to a 2dp Decimal.

    Raises:
        ValueError: if the value is not a finite number or has more than 2 decimal places
    """
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"not a monetary amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"not a monetary amount: {value!r}")
    if amount.as_tuple().exponent < -2:
        raise ValueError(f"more than 2 decimal places: {value!r}")
    return amount.quantize(CENT)


class Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class User(Record):
    id: str
    name: str
    email: str
    phone: str
    avatar: Optional[str] = None
    is_setup_complete: bool = False
    default_account_id: Optional[str] = None
    theme: Theme = "system"
    notifications: bool = True


class BankAccount(Record):
    id: str
    user_id: str
    bank_name: str
    account_number: str
    ifsc_code: str
    account_type: AccountType = "savings"
    balance: Decimal = Field(default=Decimal("0.00"), ge=0)
    is_default: bool = False
    is_active: bool = True
    created_at: datetime

    @field_validator("balance", mode="before")
    @classmethod
    def _money(cls, v):
        return to_money(v)


class VPA(Record):
    id: str
    user_id: str
    vpa_id: str
    is_default: bool = False
    is_active: bool = True
    created_at: datetime


class Contact(Record):
    id: str
    user_id: str
    name: str
    phone: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    is_favorite: bool = False
    created_at: datetime


class Beneficiary(Record):
    id: str
    user_id: str
    name: str
    vpa_id: Optional[str] = None
    phone: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    bank_name: Optional[str] = None
    is_favorite: bool = False
    last_used: datetime
    created_at: datetime

    @property
    def has_payment_method(self) -> bool:
        """False for a bare draft with no VPA, phone or account number."""
        return bool(self.vpa_id or self.phone or self.account_number)


class Transaction(Record):
    id: str
    user_id: str
    type: TransactionType
    status: TransactionStatus
    amount: Decimal = Field(gt=0)
    currency: str = "INR"
    description: Optional[str] = None
    reference_id: str
    upi_reference_id: str
    sender_vpa: Optional[str] = None
    receiver_vpa: Optional[str] = None
    sender_phone: Optional[str] = None
    receiver_phone: Optional[str] = None
    sender_account_id: Optional[str] = None
    receiver_account_id: Optional[str] = None
    fee: Optional[Decimal] = None
    timestamp: datetime
    completed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _money(cls, v):
        return to_money(v)

    @property
    def is_terminal(self) -> bool:
        return self.status in ("success", "failed")


class PaymentRequest(Record):
    id: str
    user_id: str
    requester_id: str
    requester_name: str
    requester_vpa: str
    amount: Decimal = Field(gt=0)
    currency: str = "INR"
    description: Optional[str] = None
    status: RequestStatus = "pending"
    expires_at: datetime
    created_at: datetime
    responded_at: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _money(cls, v):
        return to_money(v)

    def is_expired(self, now: datetime) -> bool:
        return self.status == "expired" or (self.status == "pending" and now >= self.expires_at)


class QRCode(Record):
    id: str
    user_id: str
    type: QRType
    data: str
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    expires_at: Optional[datetime] = None


class Recipient(Record):
    type: RecipientType
    value: str
    name: Optional[str] = None


class ParsedQRCode(Record):
    type: QRType
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    recipient: Optional[str] = None
    payee_name: Optional[str] = None


class HistoryFilter(Record):
    type: Optional[TransactionType] = None
    status: Optional[TransactionStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class OtpAck(Record):
    message: str


class Balance(Record):
    account_id: str
    balance: Decimal
