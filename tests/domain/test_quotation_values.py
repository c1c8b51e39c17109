"""Tests for quotation value objects and field validation."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from quotedesk_kernel.domain.quotation import (
    LineItem,
    QuotationUpdate,
    new_quotation,
    validate_amount,
    validate_client,
)
from quotedesk_kernel.domain.values import QuotationStatus, Role, to_money
from quotedesk_kernel.exceptions import (
    BlankClientError,
    InvalidAmountError,
    NonPositiveAmountError,
    UnknownRoleError,
    UnknownStatusError,
)

NOW = datetime(2025, 2, 1, tzinfo=timezone.utc)


class TestMoney:

    def test_rounds_half_up_to_cents(self):
        assert to_money("10.005") == Decimal("10.01")
        assert to_money(3) == Decimal("3.00")

    def test_line_item_amount_is_qty_times_rate(self):
        li = LineItem(1, "Pipe", "CP-25", Decimal("500"), "m", Decimal("28.50"))
        assert li.amount == Decimal("14250.00")


class TestComponentsTotal:

    def test_seed_q101_components_sum_to_amount(self, seed_quotations):
        q101 = next(q for q in seed_quotations if q.id == "Q-101")
        assert q101.components_total() == q101.amount
        assert sum(li.amount for li in q101.line_items) == q101.subtotal

    def test_missing_component_gives_none(self):
        q = new_quotation("Q-1", "A", "10", NOW, subtotal=Decimal("8"), gst=Decimal("2"))
        assert q.components_total() is None


class TestValidation:

    def test_client_trimmed(self):
        assert validate_client("  Acme ") == "Acme"

    @pytest.mark.parametrize("client", ["", "   "])
    def test_blank_client_rejected(self, client):
        with pytest.raises(BlankClientError):
            validate_client(client)

    @pytest.mark.parametrize("amount", [0, "-1", Decimal("0.001")])
    def test_non_positive_amount_rejected(self, amount):
        with pytest.raises(NonPositiveAmountError):
            validate_amount(amount)

    @pytest.mark.parametrize("amount", ["abc", "", "NaN", "Infinity", float("inf")])
    def test_non_finite_or_unparseable_amount_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            validate_amount(amount)

    def test_new_quotation_starts_pending_with_one_entry(self):
        q = new_quotation("Q-1", "Acme", "99.999", NOW)
        assert q.status == QuotationStatus.PENDING
        assert q.amount == Decimal("100.00")
        assert len(q.status_history) == 1
        assert q.status_history[0].changed_at == NOW

    def test_quotation_is_frozen(self):
        q = new_quotation("Q-1", "Acme", "1", NOW)
        with pytest.raises(FrozenInstanceError):
            q.status = QuotationStatus.APPROVED

    def test_touched_never_moves_backwards(self):
        q = new_quotation("Q-1", "Acme", "1", NOW)
        assert q.touched(NOW - timedelta(days=1)).last_updated == NOW
        assert q.touched(NOW + timedelta(days=1)).last_updated == NOW + timedelta(days=1)


class TestParsing:

    def test_status_parse_is_case_insensitive(self):
        assert QuotationStatus.parse("approved") is QuotationStatus.APPROVED

    def test_unknown_status(self):
        with pytest.raises(UnknownStatusError):
            QuotationStatus.parse("archived")

    def test_unknown_role(self):
        with pytest.raises(UnknownRoleError):
            Role.parse("admin")


class TestQuotationUpdate:

    def test_changes_lists_only_set_fields(self):
        update = QuotationUpdate(status=QuotationStatus.APPROVED, client="X")
        assert update.changes() == {"status": QuotationStatus.APPROVED, "client": "X"}
        assert update.touches_details()

    def test_status_only_does_not_touch_details(self):
        assert not QuotationUpdate(status=QuotationStatus.REJECTED).touches_details()
