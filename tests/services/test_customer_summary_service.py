"""
Tests for CustomerSummaryService: snapshot loading plus the Summary Builder
against a real database session.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from receivables_kernel.domain import clock as clock_module
from receivables_kernel.domain.records import InvoiceStatus
from receivables_kernel.exceptions import CustomerNotFoundError
from receivables_kernel.models import CollectionChequeModel, CollectionModel
from receivables_services.customer_summary_service import CustomerSummaryService
from tests.builders import lkr


class TestSummarize:
    """End-to-end summary of the seeded ledger at 2024-06-15."""

    def setup_method(self):
        self.expected_ref = date(2024, 6, 15)

    def test_customer_totals(self, session, seeded_ledger, deterministic_clock, policy):
        service = CustomerSummaryService(session, deterministic_clock, policy)
        summary = service.summarize(seeded_ledger.customer_id)

        assert summary.reference_date == self.expected_ref
        assert summary.total_invoiced == lkr(3000)
        assert summary.total_collected == lkr(1500)
        assert summary.unrealized_payments == lkr(1000)
        assert summary.returned_cheques_amount == lkr(300)
        assert summary.returned_cheques_count == 1
        assert summary.total_returns == lkr(200)
        assert summary.outstanding_amount == lkr(1600)
        assert summary.outstanding_with_unrealized == lkr(600)
        assert not summary.has_integrity_findings

    def test_invoice_lines(self, session, seeded_ledger, deterministic_clock, policy):
        summary = CustomerSummaryService(session, deterministic_clock, policy).summarize(
            seeded_ledger.customer_id,
        )
        lines = {line.invoice_id: line for line in summary.invoices}

        assert lines["inv-1"].status is InvoiceStatus.PAID
        assert lines["inv-2"].returns_amount == lkr(200)
        assert lines["inv-2"].outstanding_amount == lkr(300)
        assert lines["inv-2"].status is InvoiceStatus.PARTIALLY_PAID
        assert lines["inv-2"].invoice_number == "INV-0002"

    def test_future_cheque_realizes_when_clock_moves(self, session, seeded_ledger, deterministic_clock, policy):
        service = CustomerSummaryService(session, deterministic_clock, policy)
        deterministic_clock.set_time(datetime(2024, 7, 10, 8, 0, tzinfo=timezone.utc))

        summary = service.summarize(seeded_ledger.customer_id)

        assert summary.total_collected == lkr(2500)
        assert summary.unrealized_payments.is_zero
        assert summary.outstanding_amount == lkr(600)

    def test_explicit_reference_date(self, session, seeded_ledger, deterministic_clock, policy):
        service = CustomerSummaryService(session, deterministic_clock, policy)
        summary = service.summarize(seeded_ledger.customer_id, reference_date=date(2024, 6, 9))

        # The 2024-06-10 cheque is not yet realized.
        assert summary.total_collected == lkr(1000)

    def test_customer_id_bound_in_logs(self, session, seeded_ledger, deterministic_clock, policy, captured_logs):
        CustomerSummaryService(session, deterministic_clock, policy).summarize(seeded_ledger.customer_id)

        completed = [r for r in captured_logs() if r["message"] == "customer_summary_completed"]
        assert completed[-1]["customer_id"] == seeded_ledger.customer_id

    def test_unknown_customer(self, session, seeded_ledger, deterministic_clock, policy):
        with pytest.raises(CustomerNotFoundError):
            CustomerSummaryService(session, deterministic_clock, policy).summarize("nobody")

    def test_default_policy_loaded(self, session, seeded_ledger, deterministic_clock):
        service = CustomerSummaryService(session, deterministic_clock)
        assert service.policy.config_id == "agency-receivables"
        assert service.reference_date() == self.expected_ref


class TestDefaultClock:
    """Without an injected clock the reference day is the policy's local day."""

    @pytest.fixture(autouse=True)
    def _early_morning_in_colombo(self, monkeypatch):
        # 2024-06-15 02:00 in Colombo, still 2024-06-14 in UTC
        instant = datetime(2024, 6, 14, 20, 30, tzinfo=timezone.utc)

        class _FrozenDateTime(datetime):
            @classmethod
            def now(cls, tz=None):
                return instant.astimezone(tz)

        monkeypatch.setattr(clock_module, "datetime", _FrozenDateTime)

    def test_reference_date_in_policy_zone(self, session, seeded_ledger, policy):
        assert policy.timezone == ZoneInfo("Asia/Colombo")
        assert CustomerSummaryService(session, policy=policy).reference_date() == date(2024, 6, 15)

    def test_cheque_dated_today_is_realized(self, session, seeded_ledger, policy):
        session.add(CollectionModel(
            id="col-today", customer_id=seeded_ledger.customer_id, total_amount=Decimal("250.00"),
            payment_method="cheque", cash_amount=Decimal("0"), cheque_amount=Decimal("250.00"),
            cheques=[CollectionChequeModel(
                id="chq-today", cheque_number="100003", bank_name="BOC",
                amount=Decimal("250.00"), cheque_date=date(2024, 6, 15), status="pending",
            )],
        ))
        session.flush()

        summary = CustomerSummaryService(session, policy=policy).summarize(seeded_ledger.customer_id)

        assert summary.total_collected == lkr(1750)
        assert summary.unrealized_payments == lkr(1000)
