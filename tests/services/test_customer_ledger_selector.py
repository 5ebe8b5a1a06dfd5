"""
Tests for CustomerLedgerSelector.

Covers:
- Snapshot contents and typing
- Legacy cheque statuses translated on read
- Return line totals limited to credit returns
- Per-invoice allocation failures degrade instead of aborting
- Fetch failures for required sources raise SnapshotFetchError
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from receivables_kernel.domain.records import ChequeStatus, ReturnStatus
from receivables_kernel.domain.values import Money
from receivables_kernel.exceptions import CustomerNotFoundError, SnapshotFetchError
from receivables_kernel.selectors.customer_ledger import CustomerLedgerSelector


class _FlakyAllocationSelector(CustomerLedgerSelector):
    """Fails the allocation fetch for selected invoices."""

    def __init__(self, session, failing_invoice_ids):
        super().__init__(session)
        self.failing_invoice_ids = set(failing_invoice_ids)

    def _fetch_invoice_allocations(self, invoice_id):
        if invoice_id in self.failing_invoice_ids:
            raise OperationalError("SELECT collection_allocations", {}, Exception("timeout"))
        return super()._fetch_invoice_allocations(invoice_id)


class _BrokenReturnsSelector(CustomerLedgerSelector):
    def _fetch_returns(self, customer_id):
        raise OperationalError("SELECT returns", {}, Exception("connection reset"))


class TestLoadSnapshot:
    """Tests for a successful snapshot load."""

    def test_customer(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        assert snapshot.customer.name == "Perera Stores"

    def test_invoices_newest_first_with_items(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        assert [inv.id for inv in snapshot.invoices] == ["inv-2", "inv-1"]
        assert snapshot.invoices[0].item_ids == ("item-2a", "item-2b")
        assert snapshot.invoices[0].total == Money.of("2000.00", "LKR")

    def test_only_this_customers_rows(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        assert "inv-other" not in {inv.id for inv in snapshot.invoices}
        assert {c.id for c in snapshot.collections} == {"col-1", "col-2", "col-3"}

    def test_bounced_cheque_reads_as_returned(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        cheques = {c.id: c for col in snapshot.collections for c in col.cheques}
        assert cheques[seeded_ledger.bounced_cheque_id].status is ChequeStatus.RETURNED
        assert cheques[seeded_ledger.future_cheque_id].status is ChequeStatus.PENDING

    def test_null_amounts_read_as_zero(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        col3 = next(c for c in snapshot.collections if c.id == "col-3")
        assert col3.cash_amount.is_zero
        assert col3.cash_discount.is_zero

    def test_returns_all_statuses(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        assert {r.status for r in snapshot.returns} == {ReturnStatus.APPROVED, ReturnStatus.PENDING}

    def test_return_items_only_from_credit_returns(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        assert snapshot.return_items_by_invoice_item == {"item-2a": Money.of("200.00", "LKR")}

    def test_allocations_by_invoice(self, session, seeded_ledger):
        snapshot = CustomerLedgerSelector(session).load_snapshot(seeded_ledger.customer_id)

        assert snapshot.allocations_by_invoice["inv-1"][0].allocated_amount.amount == Decimal("1000.00")
        assert snapshot.allocations_by_invoice["inv-2"][0].collection_id == "col-2"
        assert snapshot.unavailable_allocation_invoice_ids == frozenset()


class TestFailures:
    """Tests for failure handling."""

    def test_unknown_customer(self, session, seeded_ledger):
        with pytest.raises(CustomerNotFoundError) as exc_info:
            CustomerLedgerSelector(session).get_customer("nobody")
        assert exc_info.value.customer_id == "nobody"

    def test_allocation_failure_degrades_invoice(self, session, seeded_ledger, captured_logs):
        selector = _FlakyAllocationSelector(session, {"inv-2"})
        snapshot = selector.load_snapshot(seeded_ledger.customer_id)

        assert snapshot.unavailable_allocation_invoice_ids == frozenset({"inv-2"})
        assert "inv-2" not in snapshot.allocations_by_invoice
        assert "inv-1" in snapshot.allocations_by_invoice
        failures = [r for r in captured_logs() if r["message"] == "invoice_allocations_fetch_failed"]
        assert failures[-1]["invoice_id"] == "inv-2"

    def test_required_source_failure_raises(self, session, seeded_ledger):
        with pytest.raises(SnapshotFetchError) as exc_info:
            _BrokenReturnsSelector(session).load_snapshot(seeded_ledger.customer_id)

        assert exc_info.value.source == "returns"
        assert exc_info.value.customer_id == seeded_ledger.customer_id
