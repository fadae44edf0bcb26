"""
Result envelopes returned by the validation engine and the mock service.

Neither layer raises for expected failures: validators hand back a
ValidationResult, service operations a ServiceResult[T].
"""
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

T = TypeVar("T")


class ErrorCode(str, Enum):
    # validation
    REQUIRED = "required"
    FORMAT_ERROR = "format_error"
    LENGTH_ERROR = "length_error"
    UNKNOWN_PROVIDER = "unknown_provider"
    NOT_A_NUMBER = "not_a_number"
    NOT_POSITIVE = "not_positive"
    TOO_LARGE = "too_large"
    TOO_PRECISE = "too_precise"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    INVALID_CHARS = "invalid_chars"
    # service
    NETWORK_ERROR = "network_error"
    INVALID_OTP = "invalid_otp"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    NOT_FOUND = "not_found"
    ALREADY_RESPONDED = "already_responded"
    EXPIRED = "expired"


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    error: Optional[str] = None
    code: Optional[ErrorCode] = None

    @model_validator(mode="after")
    def _error_iff_invalid(self):
        if self.is_valid and self.error:
            raise ValueError("a valid result cannot carry an error")
        if not self.is_valid and not self.error:
            raise ValueError("an invalid result needs an error message")
        return self

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, code: ErrorCode, message: str) -> "ValidationResult":
        return cls(is_valid=False, error=message, code=code)


class ServiceResult(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    code: Optional[ErrorCode] = None

    @model_validator(mode="after")
    def _payload_iff_success(self):
        if self.success and (self.data is None or self.error):
            raise ValueError("a successful result needs data and no error")
        if not self.success and (self.data is not None or not self.error):
            raise ValueError("a failed result needs an error and no data")
        return self

    @classmethod
    def ok(cls, data, message: Optional[str] = None) -> "ServiceResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str, code: ErrorCode) -> "ServiceResult":
        return cls(success=False, error=error, code=code)
