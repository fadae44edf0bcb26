"""
Canned demo records.

The mock service answers from these when no real source is wired in, and the
store seeds itself from build_demo_snapshot() on first start.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List

from upi_sim.schemas.records import (
    VPA,
    BankAccount,
    Beneficiary,
    Contact,
    PaymentRequest,
    QRCode,
    Transaction,
    User,
)

DEMO_USER_ID = "user-1"
DEMO_VPA = "rahul.sharma@hdfc"

_T0 = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

DEMO_USER = User(
    id=DEMO_USER_ID,
    name="Rahul Sharma",
    email="rahul.sharma@example.com",
    phone="9876543210",
    avatar="https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=150&h=150&fit=crop&crop=face",
    is_setup_complete=True,
    default_account_id="acc-1",
    theme="system",
    notifications=True,
)

DEMO_ACCOUNTS = [
    BankAccount(
        id="acc-1",
        user_id=DEMO_USER_ID,
        bank_name="HDFC Bank",
        account_number="50100123456789",
        ifsc_code="HDFC0001234",
        account_type="savings",
        balance=Decimal("125000.50"),
        is_default=True,
        created_at=_T0,
    ),
    BankAccount(
        id="acc-2",
        user_id=DEMO_USER_ID,
        bank_name="State Bank of India",
        account_number="30123456789",
        ifsc_code="SBIN0005678",
        account_type="current",
        balance=Decimal("48210.00"),
        created_at=_T0 + timedelta(days=3),
    ),
]

DEMO_VPAS = [
    VPA(id="vpa-1", user_id=DEMO_USER_ID, vpa_id=DEMO_VPA, is_default=True, created_at=_T0),
    VPA(id="vpa-2", user_id=DEMO_USER_ID, vpa_id="9876543210@paytm", created_at=_T0 + timedelta(days=3)),
]

DEMO_CONTACTS = [
    Contact(id="contact-1", user_id=DEMO_USER_ID, name="Priya Patel", phone="9123456780",
            email="priya.patel@example.com", is_favorite=True, created_at=_T0),
    Contact(id="contact-2", user_id=DEMO_USER_ID, name="Amit Kumar", phone="8899776655",
            created_at=_T0 + timedelta(days=1)),
]

DEMO_BENEFICIARIES = [
    Beneficiary(id="ben-1", user_id=DEMO_USER_ID, name="Priya Patel", vpa_id="priya.patel@paytm",
                is_favorite=True, last_used=_T0 + timedelta(days=14), created_at=_T0),
    Beneficiary(id="ben-2", user_id=DEMO_USER_ID, name="Amit Kumar", account_number="912010012345678",
                ifsc_code="UTIB0000123", bank_name="Axis Bank",
                last_used=_T0 + timedelta(days=10), created_at=_T0 + timedelta(days=1)),
]

DEMO_TRANSACTIONS = [
    Transaction(
        id="txn-1",
        user_id=DEMO_USER_ID,
        type="pay",
        status="success",
        amount=Decimal("2500.00"),
        description="Lunch payment",
        reference_id="TXN123456789",
        upi_reference_id="123456789012345",
        sender_vpa=DEMO_VPA,
        receiver_vpa="priya.patel@paytm",
        sender_account_id="acc-1",
        timestamp=datetime(2024, 3, 15, 12, 30, 0, tzinfo=timezone.utc),
        completed_at=datetime(2024, 3, 15, 12, 30, 45, tzinfo=timezone.utc),
    ),
    Transaction(
        id="txn-2",
        user_id=DEMO_USER_ID,
        type="collect",
        status="success",
        amount=Decimal("1200.00"),
        description="Movie tickets",
        reference_id="TXN223456789",
        upi_reference_id="223456789012345",
        sender_vpa="amit.kumar@okicici",
        receiver_vpa=DEMO_VPA,
        receiver_account_id="acc-1",
        timestamp=datetime(2024, 3, 12, 19, 5, 0, tzinfo=timezone.utc),
        completed_at=datetime(2024, 3, 12, 19, 5, 20, tzinfo=timezone.utc),
    ),
    Transaction(
        id="txn-3",
        user_id=DEMO_USER_ID,
        type="pay",
        status="failed",
        amount=Decimal("850.00"),
        description="Electricity bill",
        reference_id="TXN323456789",
        upi_reference_id="323456789012345",
        sender_vpa=DEMO_VPA,
        receiver_phone="8899776655",
        sender_account_id="acc-2",
        timestamp=datetime(2024, 3, 8, 8, 15, 0, tzinfo=timezone.utc),
        failure_reason="Beneficiary bank unavailable",
    ),
    Transaction(
        id="txn-4",
        user_id=DEMO_USER_ID,
        type="request",
        status="pending",
        amount=Decimal("500.00"),
        description="Cab share",
        reference_id="TXN423456789",
        upi_reference_id="423456789012345",
        sender_vpa=DEMO_VPA,
        receiver_vpa="amit.kumar@okicici",
        timestamp=datetime(2024, 3, 5, 22, 40, 0, tzinfo=timezone.utc),
    ),
]

# The record respond_to_payment_request falls back to when it has no lookup.
DEMO_INCOMING_REQUEST = PaymentRequest(
    id="req-1",
    user_id=DEMO_USER_ID,
    requester_id="user-2",
    requester_name="Priya Patel",
    requester_vpa="priya.patel@paytm",
    amount=Decimal("2000.00"),
    description="Weekend trip expenses",
    status="pending",
    expires_at=datetime(2099, 1, 1, tzinfo=timezone.utc),
    created_at=datetime(2024, 3, 14, 10, 0, 0, tzinfo=timezone.utc),
)

DEMO_PAYMENT_REQUESTS = [DEMO_INCOMING_REQUEST]

DEMO_QR_CODES = [
    QRCode(id="qr-1", user_id=DEMO_USER_ID, type="personal", data=f"upi://{DEMO_VPA}", created_at=_T0),
]


def demo_transactions() -> List[Transaction]:
    return list(DEMO_TRANSACTIONS)


def build_demo_snapshot() -> Dict[str, Any]:
    """JSON-ready snapshot with every collection populated."""
    def dump(records):
        return [r.model_dump(mode="json") for r in records]

    return {
        "user": DEMO_USER.model_dump(mode="json"),
        "accounts": dump(DEMO_ACCOUNTS),
        "vpas": dump(DEMO_VPAS),
        "contacts": dump(DEMO_CONTACTS),
        "beneficiaries": dump(DEMO_BENEFICIARIES),
        "transactions": dump(DEMO_TRANSACTIONS),
        "payment_requests": dump(DEMO_PAYMENT_REQUESTS),
        "qr_codes": dump(DEMO_QR_CODES),
    }
