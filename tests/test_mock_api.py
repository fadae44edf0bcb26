"""
Unit tests for upi_sim/services/mock_api.py.

Latency and randomness are injected (seeded rng, recording sleep, fixed
clock) so every test is fast and deterministic.
Covers: simulated network behaviour, business rules per operation, QR
encode/parse, payment request responses and history filtering.
"""
import asyncio
import random
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from upi_sim.config import Settings
from upi_sim.demo_data import DEMO_INCOMING_REQUEST, DEMO_TRANSACTIONS, DEMO_VPA
from upi_sim.schemas.records import HistoryFilter, Recipient
from upi_sim.schemas.results import ErrorCode
from upi_sim.services.mock_api import FAILURE_MESSAGES, MockApiService, build_upi_uri
from tests.conftest import FIXED_NOW, FakeSleep, make_service

VPA_RECIPIENT = Recipient(type="vpa", value="priya.patel@paytm", name="Priya Patel")


# ---------------------------------------------------------------------------
# Simulated network: latency window and random failures
# ---------------------------------------------------------------------------
class TestSimulatedNetwork:
    async def test_every_call_waits_within_the_latency_window(self, service, fake_sleep):
        await service.send_otp("9876543210")
        await service.check_balance("acc-1")
        await service.get_transaction_history()

        assert len(fake_sleep.delays) == 3
        assert all(0.3 <= d <= 1.2 for d in fake_sleep.delays)

    async def test_failure_rate_one_always_fails_with_network_error(self):
        service = make_service(failure_rate=1.0)
        result = await service.login("9876543210", "123456")

        assert not result.success
        assert result.code == ErrorCode.NETWORK_ERROR
        assert result.error == "Network error. Please try again."
        assert result.data is None

    async def test_network_failure_precedes_business_rules(self):
        service = make_service(failure_rate=1.0)
        result = await service.process_payment(150000, VPA_RECIPIENT, "acc-1")
        assert result.code == ErrorCode.NETWORK_ERROR
        assert result.error == FAILURE_MESSAGES["process_payment"]

    async def test_failure_messages_are_operation_specific(self):
        service = make_service(failure_rate=1.0)
        otp = await service.send_otp("9876543210")
        qr = await service.parse_qr_code("upi://rahul.sharma@hdfc")
        assert otp.error == "Failed to send OTP. Please try again."
        assert qr.error == FAILURE_MESSAGES["parse_qr_code"]

    async def test_failure_rate_roughly_matches_configuration(self):
        service = make_service(failure_rate=0.05, rng=random.Random(1234))
        results = [await service.check_balance("acc-1") for _ in range(2000)]
        failures = sum(1 for r in results if not r.success)
        assert 40 <= failures <= 170

    async def test_from_settings_uses_configured_knobs(self):
        settings = Settings(failure_rate=0.0, min_delay_ms=100, max_delay_ms=200, demo_otp="654321")
        sleep = FakeSleep()
        service = MockApiService.from_settings(settings, sleep=sleep, rng=random.Random(3))

        ok = await service.login("9876543210", "654321")
        rejected = await service.login("9876543210", "123456")

        assert ok.success
        assert rejected.code == ErrorCode.INVALID_OTP
        assert all(0.1 <= d <= 0.2 for d in sleep.delays)

    async def test_concurrent_calls_get_distinct_ids(self, service):
        results = await asyncio.gather(*[service.create_vpa(f"user{i}@paytm") for i in range(25)])
        ids = [r.data.id for r in results]
        assert len(set(ids)) == 25
        assert all(i.startswith("vpa-") for i in ids)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------
class TestAuth:
    async def test_send_otp(self, service):
        result = await service.send_otp("9876543210")
        assert result.success
        assert result.data.message == "OTP sent successfully"

    async def test_login_with_demo_otp(self, service):
        result = await service.login("9123456780", "123456")

        assert result.success
        user = result.data
        assert user.id == "user-1"
        assert user.phone == "9123456780"
        assert user.is_setup_complete is False

    async def test_login_with_wrong_otp(self, service):
        result = await service.login("9876543210", "000000")

        assert not result.success
        assert result.code == ErrorCode.INVALID_OTP
        assert result.error == "Invalid OTP. Please try again."


# ---------------------------------------------------------------------------
# Accounts, VPAs, contacts, beneficiaries
# ---------------------------------------------------------------------------
class TestRecordCreation:
    async def test_link_bank_account(self, service):
        result = await service.link_bank_account("HDFC Bank", "50100987654321", "HDFC0001234")

        account = result.data
        assert account.id.startswith("acc-")
        assert account.user_id == "user-1"
        assert account.balance == Decimal("0.00")
        assert account.is_active
        assert account.created_at == FIXED_NOW

    async def test_link_bank_account_with_opening_balance(self, service):
        result = await service.link_bank_account(
            "HDFC Bank", "50100987654321", "HDFC0001234", balance="5000.25"
        )
        assert result.data.balance == Decimal("5000.25")

    async def test_link_bank_account_bad_balance_fails_without_raising(self, service):
        for balance in ("10.555", "-1", "abc"):
            result = await service.link_bank_account(
                "HDFC Bank", "50100987654321", "HDFC0001234", balance=balance
            )
            assert not result.success
            assert result.code == ErrorCode.FORMAT_ERROR
            assert result.error == "Invalid account balance."

    async def test_create_vpa(self, service):
        result = await service.create_vpa("rahul.s@okicici")
        assert result.data.vpa_id == "rahul.s@okicici"
        assert result.data.is_default is False

    async def test_add_contact(self, service):
        result = await service.add_contact("Neha Singh", "9988776655", email="neha@example.com")
        assert result.data.name == "Neha Singh"
        assert result.data.id.startswith("contact-")

    async def test_add_beneficiary_without_payment_method_is_accepted(self, service):
        result = await service.add_beneficiary("Draft Person")

        assert result.success
        assert result.data.has_payment_method is False
        assert result.data.last_used == FIXED_NOW

    async def test_check_balance_returns_fixed_figure(self, service):
        result = await service.check_balance("acc-2")
        assert result.data.account_id == "acc-2"
        assert result.data.balance == Decimal("125000.50")


# ---------------------------------------------------------------------------
# Payments and money requests
# ---------------------------------------------------------------------------
class TestPayments:
    async def test_successful_vpa_payment(self, service):
        result = await service.process_payment(2500, VPA_RECIPIENT, "acc-1", description="Dinner")

        assert result.success
        txn = result.data
        assert txn.type == "pay"
        assert txn.status == "success"
        assert txn.amount == Decimal("2500.00")
        assert txn.currency == "INR"
        assert txn.sender_vpa == DEMO_VPA
        assert txn.receiver_vpa == "priya.patel@paytm"
        assert txn.timestamp == FIXED_NOW
        assert txn.completed_at == FIXED_NOW
        assert txn.reference_id
        assert txn.upi_reference_id.isdigit()

    async def test_payment_to_phone(self, service):
        recipient = Recipient(type="phone", value="9123456780")
        txn = (await service.process_payment("10.50", recipient, "acc-1")).data
        assert txn.receiver_phone == "9123456780"
        assert txn.receiver_vpa is None

    async def test_payment_from_qr_payload(self, service):
        recipient = Recipient(type="qr", value="upi://shop@okicici?am=45")
        txn = (await service.process_payment(45, recipient, "acc-1")).data
        assert txn.receiver_vpa == "shop@okicici"

    async def test_amount_over_limit_is_insufficient_balance(self, service):
        result = await service.process_payment(150000, VPA_RECIPIENT, "acc-1")

        assert not result.success
        assert result.code == ErrorCode.INSUFFICIENT_BALANCE
        assert result.error == "Insufficient balance in your account."

    async def test_amount_at_limit_succeeds(self, service):
        result = await service.process_payment(100000, VPA_RECIPIENT, "acc-1")
        assert result.success

    async def test_exponent_amount_fails_without_raising(self, service):
        result = await service.process_payment("1e-7", VPA_RECIPIENT, "acc-1")

        assert not result.success
        assert result.code == ErrorCode.TOO_PRECISE
        assert result.error == "Amount can have maximum 2 decimal places"

    async def test_three_decimal_amount_is_not_rounded(self, service):
        result = await service.process_payment(100.555, VPA_RECIPIENT, "acc-1")
        assert result.code == ErrorCode.TOO_PRECISE

    async def test_malformed_amounts_fail_with_validation_codes(self, service):
        assert (await service.process_payment("abc", VPA_RECIPIENT, "acc-1")).code == ErrorCode.NOT_A_NUMBER
        assert (await service.process_payment(0, VPA_RECIPIENT, "acc-1")).code == ErrorCode.NOT_POSITIVE

    async def test_request_money(self, service):
        result = await service.request_money(500, VPA_RECIPIENT, description="Cab share")

        req = result.data
        assert req.status == "pending"
        assert req.amount == Decimal("500.00")
        assert req.requester_vpa == DEMO_VPA
        assert req.requester_name == "Rahul Sharma"
        assert req.expires_at == FIXED_NOW + timedelta(days=7)

    async def test_request_money_exponent_amount_fails_without_raising(self, service):
        result = await service.request_money("5e-3", VPA_RECIPIENT)

        assert not result.success
        assert result.code == ErrorCode.TOO_PRECISE

    async def test_request_money_has_no_ceiling(self, service):
        result = await service.request_money(250000, VPA_RECIPIENT)
        assert result.data.amount == Decimal("250000.00")


# ---------------------------------------------------------------------------
# Responding to payment requests
# ---------------------------------------------------------------------------
class TestRespondToPaymentRequest:
    async def test_without_lookup_answers_the_demo_request(self, service):
        result = await service.respond_to_payment_request("req-99", "accept")

        req = result.data
        assert req.id == "req-99"
        assert req.status == "accepted"
        assert req.responded_at == FIXED_NOW
        assert req.requester_name == DEMO_INCOMING_REQUEST.requester_name

    async def test_decline_pending_request(self):
        service = make_service(request_lookup=lambda rid: DEMO_INCOMING_REQUEST)
        result = await service.respond_to_payment_request("req-1", "decline")
        assert result.data.status == "declined"

    async def test_unknown_request(self):
        service = make_service(request_lookup=lambda rid: None)
        result = await service.respond_to_payment_request("req-x", "accept")
        assert result.code == ErrorCode.NOT_FOUND

    async def test_already_answered_request(self):
        answered = DEMO_INCOMING_REQUEST.model_copy(update={"status": "declined"})
        service = make_service(request_lookup=lambda rid: answered)
        result = await service.respond_to_payment_request("req-1", "accept")
        assert result.code == ErrorCode.ALREADY_RESPONDED

    async def test_expired_request(self):
        stale = DEMO_INCOMING_REQUEST.model_copy(update={"expires_at": FIXED_NOW - timedelta(minutes=1)})
        service = make_service(request_lookup=lambda rid: stale)
        result = await service.respond_to_payment_request("req-1", "accept")
        assert result.code == ErrorCode.EXPIRED

    async def test_unknown_action_raises(self, service):
        with pytest.raises(ValueError, match="Unknown action"):
            await service.respond_to_payment_request("req-1", "ignore")


# ---------------------------------------------------------------------------
# QR codes
# ---------------------------------------------------------------------------
class TestQrCodes:
    async def test_personal_code(self, service):
        qr = (await service.generate_qr_code("personal")).data
        assert qr.data == f"upi://{DEMO_VPA}"
        assert qr.expires_at is None

    async def test_payment_code_encodes_amount_and_note(self, service):
        qr = (await service.generate_qr_code("payment", amount=100, description="Lunch split")).data

        assert qr.data == f"upi://{DEMO_VPA}?am=100&tn=Lunch%20split"
        assert qr.amount == Decimal("100")
        assert qr.expires_at == FIXED_NOW + timedelta(hours=24)

    async def test_payment_code_without_note_omits_tn(self, service):
        qr = (await service.generate_qr_code("payment", amount="45.50")).data
        assert qr.data == f"upi://{DEMO_VPA}?am=45.50"

    async def test_payment_code_rejects_three_decimal_amount(self, service):
        result = await service.generate_qr_code("payment", amount="10.555")
        assert not result.success
        assert result.code == ErrorCode.TOO_PRECISE

    async def test_generated_payment_code_parses_back(self, service):
        qr = (await service.generate_qr_code("payment", amount=100, description="Lunch split")).data
        parsed = (await service.parse_qr_code(qr.data)).data

        assert parsed.type == "payment"
        assert parsed.amount == 100
        assert parsed.description == "Lunch split"
        assert parsed.recipient == DEMO_VPA

    async def test_parse_personal_code(self, service):
        parsed = (await service.parse_qr_code("upi://rahul.sharma@hdfc")).data
        assert parsed.type == "personal"
        assert parsed.amount is None
        assert parsed.recipient == "rahul.sharma@hdfc"

    async def test_parse_pay_form(self, service):
        parsed = (await service.parse_qr_code("upi://pay?pa=shop@okicici&pn=Tea%20Stall&am=45.50")).data
        assert parsed.recipient == "shop@okicici"
        assert parsed.payee_name == "Tea Stall"
        assert parsed.amount == Decimal("45.50")

    async def test_parse_wrong_scheme(self, service):
        result = await service.parse_qr_code("https://example.com")
        assert result.code == ErrorCode.FORMAT_ERROR
        assert result.error == "Invalid QR code format."

    async def test_parse_bad_amount(self, service):
        result = await service.parse_qr_code("upi://shop@okicici?am=abc")
        assert result.code == ErrorCode.FORMAT_ERROR

    def test_build_upi_uri(self):
        assert build_upi_uri("a@paytm") == "upi://a@paytm"
        assert build_upi_uri("a@paytm", Decimal("10.5"), "tea & snacks") == "upi://a@paytm?am=10.5&tn=tea%20%26%20snacks"


# ---------------------------------------------------------------------------
# Transaction history
# ---------------------------------------------------------------------------
class TestTransactionHistory:
    async def test_default_source_is_demo_history_newest_first(self, service):
        txns = (await service.get_transaction_history()).data
        assert [t.id for t in txns] == ["txn-1", "txn-2", "txn-3", "txn-4"]

    async def test_filter_by_type(self, service):
        txns = (await service.get_transaction_history(HistoryFilter(type="pay"))).data
        assert [t.id for t in txns] == ["txn-1", "txn-3"]

    async def test_filter_by_status(self, service):
        txns = (await service.get_transaction_history(HistoryFilter(status="failed"))).data
        assert [t.id for t in txns] == ["txn-3"]

    async def test_date_range_is_inclusive(self, service):
        filters = HistoryFilter(
            start_date=datetime(2024, 3, 8, 8, 15, tzinfo=timezone.utc),
            end_date=datetime(2024, 3, 12, 19, 5, tzinfo=timezone.utc),
        )
        txns = (await service.get_transaction_history(filters)).data
        assert [t.id for t in txns] == ["txn-2", "txn-3"]

    async def test_naive_dates_are_read_as_utc(self, service):
        filters = HistoryFilter(start_date=datetime(2024, 3, 13))
        txns = (await service.get_transaction_history(filters)).data
        assert [t.id for t in txns] == ["txn-1"]

    async def test_injected_history_source(self):
        service = make_service(history_source=lambda: list(reversed(DEMO_TRANSACTIONS[:2])))
        txns = (await service.get_transaction_history()).data
        assert [t.id for t in txns] == ["txn-1", "txn-2"]

    async def test_empty_history_is_still_success(self):
        service = make_service(history_source=lambda: [])
        result = await service.get_transaction_history()
        assert result.success
        assert result.data == []
