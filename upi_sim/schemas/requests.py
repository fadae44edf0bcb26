from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from upi_sim import validators
from upi_sim.schemas.records import AccountType, QRType, RecipientType, TransactionStatus, TransactionType
from upi_sim.schemas.results import ValidationResult


def _check(result: ValidationResult):
    if not result.is_valid:
        raise ValueError(result.error)


def _amount_text(v):
    # JSON numbers arrive as int/float; the validators work on the typed text
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class OtpRequest(BaseModel):
    phone: str

    @field_validator("phone")
    def validate_phone(cls, v):
        _check(validators.validate_phone_number(v))
        return v


class LoginRequest(BaseModel):
    phone: str
    otp: str

    @field_validator("phone")
    def validate_phone(cls, v):
        _check(validators.validate_phone_number(v))
        return v

    @field_validator("otp")
    def validate_otp(cls, v):
        if not v:
            raise ValueError("OTP is required")
        return v


class LinkAccountRequest(BaseModel):
    bank_name: str
    account_number: str
    ifsc_code: str
    account_type: AccountType = "savings"
    balance: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    is_default: bool = False

    @field_validator("bank_name")
    def validate_bank_name(cls, v):
        if not v.strip():
            raise ValueError("Bank name is required")
        return v

    @field_validator("account_number")
    def validate_account_number(cls, v):
        _check(validators.validate_account_number(v))
        return v

    @field_validator("ifsc_code")
    def validate_ifsc(cls, v):
        _check(validators.validate_ifsc(v))
        return v.upper()


class CreateVpaRequest(BaseModel):
    vpa_id: str

    @field_validator("vpa_id")
    def validate_vpa(cls, v):
        _check(validators.validate_vpa(v))
        return v


class _MoneyForm(BaseModel):
    amount: str
    recipient_type: RecipientType
    recipient_value: str
    recipient_name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("amount", mode="before")
    def amount_as_text(cls, v):
        return _amount_text(v)

    @model_validator(mode="after")
    def validate_form(self):
        _check(validators.validate_payment_form(
            self.amount, self.recipient_type, self.recipient_value, self.description,
        ))
        return self


class SendMoneyRequest(_MoneyForm):
    sender_account_id: Optional[str] = None  # defaults to the user's default account


class RequestMoneyRequest(_MoneyForm):
    pass


class RespondRequest(BaseModel):
    action: Literal["accept", "decline"]


class GenerateQrRequest(BaseModel):
    type: QRType = "personal"
    amount: Optional[str] = None
    description: Optional[str] = None

    @field_validator("amount", mode="before")
    def amount_as_text(cls, v):
        return _amount_text(v)

    @model_validator(mode="after")
    def validate_payment_fields(self):
        if self.type == "payment":
            _check(validators.validate_amount(self.amount or ""))
            _check(validators.validate_description(self.description))
        return self


class ParseQrRequest(BaseModel):
    data: str

    @field_validator("data")
    def validate_data(cls, v):
        _check(validators.validate_qr_data(v))
        return v


class AddContactRequest(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    is_favorite: bool = False

    @field_validator("name")
    def validate_name(cls, v):
        _check(validators.validate_name(v))
        return v

    @field_validator("phone")
    def validate_phone(cls, v):
        _check(validators.validate_phone_number(v))
        return v

    @field_validator("email")
    def validate_email(cls, v):
        if v:
            _check(validators.validate_email(v))
        return v


class AddBeneficiaryRequest(BaseModel):
    """Only the supplied contact methods are checked; a bare name is accepted."""

    name: str
    vpa_id: Optional[str] = None
    phone: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    bank_name: Optional[str] = None
    is_favorite: bool = False

    @field_validator("name")
    def validate_name(cls, v):
        _check(validators.validate_name(v))
        return v

    @field_validator("vpa_id")
    def validate_vpa(cls, v):
        if v:
            _check(validators.validate_vpa(v))
        return v

    @field_validator("phone")
    def validate_phone(cls, v):
        if v:
            _check(validators.validate_phone_number(v))
        return v

    @field_validator("account_number")
    def validate_account_number(cls, v):
        if v:
            _check(validators.validate_account_number(v))
        return v

    @field_validator("ifsc_code")
    def validate_ifsc(cls, v):
        if v:
            _check(validators.validate_ifsc(v))
            return v.upper()
        return v

    @model_validator(mode="after")
    def validate_bank_details(self):
        if self.account_number and not self.ifsc_code:
            raise ValueError("IFSC code is required with an account number")
        return self


class HistoryQuery(BaseModel):
    type: Optional[TransactionType] = None
    status: Optional[TransactionStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class ValidateFieldRequest(BaseModel):
    value: Optional[str] = None

    @field_validator("value", mode="before")
    def value_as_text(cls, v):
        return _amount_text(v)
