"""
Tests for the Returns Adjuster.

Covers:
- Only approved/processed returns are credits
- Customer-level total uses header totals
- Per-invoice credit from header invoice_id plus line-level items
"""

from receivables_engines.returns import ReturnsAdjuster
from receivables_kernel.domain.records import ReturnStatus
from tests.builders import lkr, make_invoice, make_return


class TestTotalReturns:
    """Tests for the customer-level return credit."""

    def setup_method(self):
        self.adjuster = ReturnsAdjuster()

    def test_only_credit_statuses_count(self):
        returns = [
            make_return(100, ReturnStatus.APPROVED),
            make_return(200, ReturnStatus.PROCESSED),
            make_return(400, ReturnStatus.PENDING),
            make_return(800, ReturnStatus.REJECTED),
        ]
        assert self.adjuster.total_returns(returns, "LKR") == lkr(300)

    def test_empty(self):
        assert self.adjuster.total_returns([], "LKR").is_zero

    def test_custom_credit_statuses(self):
        adjuster = ReturnsAdjuster(credit_statuses={ReturnStatus.PROCESSED})
        returns = [make_return(100, ReturnStatus.APPROVED), make_return(200, ReturnStatus.PROCESSED)]

        assert adjuster.total_returns(returns, "LKR") == lkr(200)


class TestInvoiceReturns:
    """Tests for per-invoice return credit."""

    def setup_method(self):
        self.adjuster = ReturnsAdjuster()

    def test_every_invoice_present(self):
        invoices = [make_invoice(100, invoice_id="inv-1"), make_invoice(100, invoice_id="inv-2")]
        result = self.adjuster.invoice_returns(invoices, [], {})

        assert set(result) == {"inv-1", "inv-2"}
        assert all(v.is_zero for v in result.values())

    def test_header_invoice_id(self):
        invoices = [make_invoice(1000, invoice_id="inv-1")]
        returns = [
            make_return(300, invoice_id="inv-1"),
            make_return(50, ReturnStatus.PENDING, invoice_id="inv-1"),
        ]
        assert self.adjuster.invoice_returns(invoices, returns, {})["inv-1"] == lkr(300)

    def test_line_items_matched_through_invoice_items(self):
        invoices = [
            make_invoice(1000, invoice_id="inv-1", item_ids=("item-1", "item-2")),
            make_invoice(500, invoice_id="inv-2", item_ids=("item-3",)),
        ]
        items = {"item-1": lkr(100), "item-2": lkr(25), "item-3": lkr(10)}
        result = self.adjuster.invoice_returns(invoices, [], items)

        assert result["inv-1"] == lkr(125)
        assert result["inv-2"] == lkr(10)

    def test_header_and_items_combined(self):
        invoices = [make_invoice(1000, invoice_id="inv-1", item_ids=("item-1",))]
        result = self.adjuster.invoice_returns(
            invoices, [make_return(200, invoice_id="inv-1")], {"item-1": lkr(40)},
        )
        assert result["inv-1"] == lkr(240)

    def test_unmatched_items_logged(self, captured_logs):
        invoices = [make_invoice(1000, invoice_id="inv-1")]
        self.adjuster.invoice_returns(invoices, [], {"item-x": lkr(40)})

        logs = [r for r in captured_logs() if r["message"] == "return_items_without_invoice"]
        assert logs[-1]["invoice_item_ids"] == ["item-x"]
