"""
Tests for the customer LedgerService.

Tests cover:
- One-sided entry validation and rounding to four places
- Stored balance moving with every posting
- Ledger order (date, then insertion) and running balances
- Date-range views keeping the opening balance
- Balance validation, mismatch detection and recalculation
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from billing_ledger.models.enums import LedgerEntryType
from billing_ledger.schemas.customer import CustomerCreate
from billing_ledger.schemas.ledger import LedgerEntryCreate
from billing_ledger.services.customer_service import CustomerService
from billing_ledger.services.ledger_service import LedgerService

TENANT_ID = 1
OTHER_TENANT_ID = 2


# --- Helpers to reduce repetition ---

def make_customer(db_session, name="Acme Co", tenant_id=TENANT_ID):
    return CustomerService(db_session).create_customer(
        tenant_id, CustomerCreate(name=name)
    )


def debit(customer, amount, on, reference="INV"):
    return LedgerEntryCreate(
        tenant_id=customer.tenant_id,
        customer_id=customer.id,
        entry_date=on,
        entry_type=LedgerEntryType.INVOICE,
        reference=reference,
        debit=Decimal(amount),
    )


def credit(customer, amount, on, reference="PAY"):
    return LedgerEntryCreate(
        tenant_id=customer.tenant_id,
        customer_id=customer.id,
        entry_date=on,
        entry_type=LedgerEntryType.PAYMENT,
        reference=reference,
        credit=Decimal(amount),
    )


class TestLedgerEntryCreate:

    def test_both_sides_rejected(self):
        with pytest.raises(ValidationError, match="exactly one of debit or credit"):
            LedgerEntryCreate(
                tenant_id=TENANT_ID,
                customer_id=1,
                entry_date=date(2024, 6, 1),
                entry_type=LedgerEntryType.INVOICE,
                reference="INV-1",
                debit=Decimal("10"),
                credit=Decimal("10"),
            )

    def test_zero_entry_rejected(self):
        with pytest.raises(ValidationError):
            LedgerEntryCreate(
                tenant_id=TENANT_ID,
                customer_id=1,
                entry_date=date(2024, 6, 1),
                entry_type=LedgerEntryType.INVOICE,
                reference="INV-1",
            )

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            LedgerEntryCreate(
                tenant_id=TENANT_ID,
                customer_id=1,
                entry_date=date(2024, 6, 1),
                entry_type=LedgerEntryType.INVOICE,
                reference="INV-1",
                debit=Decimal("-10"),
            )

    def test_amounts_rounded_to_four_places(self):
        request = LedgerEntryCreate(
            tenant_id=TENANT_ID,
            customer_id=1,
            entry_date=date(2024, 6, 1),
            entry_type=LedgerEntryType.INVOICE,
            reference="INV-1",
            debit=Decimal("1.23455"),
        )

        assert request.debit == Decimal("1.2346")

    def test_amount_below_smallest_unit_rejected(self):
        with pytest.raises(ValidationError, match="exactly one of debit or credit"):
            LedgerEntryCreate(
                tenant_id=TENANT_ID,
                customer_id=1,
                entry_date=date(2024, 6, 1),
                entry_type=LedgerEntryType.INVOICE,
                reference="INV-1",
                debit=Decimal("0.00004"),
            )


class TestPostEntry:

    def test_debit_increases_balance(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)

        service.post_entry(debit(customer, "100", date(2024, 6, 1)))
        db_session.commit()

        assert customer.balance == Decimal("100")

    def test_credit_decreases_balance(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)

        service.post_entry(debit(customer, "100", date(2024, 6, 1)))
        service.post_entry(credit(customer, "30", date(2024, 6, 2)))
        db_session.commit()

        assert customer.balance == Decimal("70")

    def test_missing_customer_rejected(self, db_session):
        service = LedgerService(db_session)
        request = LedgerEntryCreate(
            tenant_id=TENANT_ID,
            customer_id=999,
            entry_date=date(2024, 6, 1),
            entry_type=LedgerEntryType.INVOICE,
            reference="INV-1",
            debit=Decimal("10"),
        )

        with pytest.raises(ValueError, match="not found"):
            service.post_entry(request)

    def test_fractional_postings_stay_consistent(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)

        service.post_entry(debit(customer, "1.23456", date(2024, 6, 1)))
        service.post_entry(debit(customer, "1.23456", date(2024, 6, 2)))
        db_session.commit()

        assert customer.balance == Decimal("2.4692")
        assert service.validate_customer_balance(customer.id).is_consistent is True

    def test_cross_tenant_posting_rejected(self, db_session):
        customer = make_customer(db_session)
        request = debit(customer, "10", date(2024, 6, 1))
        request.tenant_id = OTHER_TENANT_ID

        with pytest.raises(ValueError, match="does not belong to tenant"):
            LedgerService(db_session).post_entry(request)


class TestCustomerLedger:

    def test_running_balance(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "100", date(2024, 6, 1), "INV-1"))
        service.post_entry(credit(customer, "40", date(2024, 6, 2), "INV-1"))
        service.post_entry(debit(customer, "50", date(2024, 6, 3), "INV-2"))
        db_session.commit()

        lines = service.get_customer_ledger(customer.id)

        assert [line.reference for line in lines] == ["INV-1", "INV-1", "INV-2"]
        assert [line.type for line in lines] == [
            LedgerEntryType.INVOICE,
            LedgerEntryType.PAYMENT,
            LedgerEntryType.INVOICE,
        ]
        assert [line.balance for line in lines] == [
            Decimal("100"), Decimal("60"), Decimal("110"),
        ]

    def test_ordered_by_date_not_insertion(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "50", date(2024, 6, 5), "LATE"))
        service.post_entry(debit(customer, "100", date(2024, 6, 1), "EARLY"))
        db_session.commit()

        lines = service.get_customer_ledger(customer.id)

        assert [line.reference for line in lines] == ["EARLY", "LATE"]
        assert [line.balance for line in lines] == [Decimal("100"), Decimal("150")]

    def test_same_day_keeps_insertion_order(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "100", date(2024, 6, 1), "INV-1"))
        service.post_entry(credit(customer, "100", date(2024, 6, 1), "INV-1"))
        db_session.commit()

        lines = service.get_customer_ledger(customer.id)

        assert [line.type for line in lines] == [
            LedgerEntryType.INVOICE, LedgerEntryType.PAYMENT,
        ]
        assert lines[-1].balance == Decimal("0")

    def test_date_range_keeps_opening_balance(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "100", date(2024, 6, 1), "INV-1"))
        service.post_entry(credit(customer, "40", date(2024, 6, 10), "INV-1"))
        service.post_entry(debit(customer, "50", date(2024, 6, 20), "INV-2"))
        db_session.commit()

        lines = service.get_customer_ledger(
            customer.id, from_date=date(2024, 6, 5), to_date=date(2024, 6, 15)
        )

        assert len(lines) == 1
        assert lines[0].credit == Decimal("40")
        assert lines[0].balance == Decimal("60")

    def test_empty_ledger(self, db_session):
        customer = make_customer(db_session)

        assert LedgerService(db_session).get_customer_ledger(customer.id) == []

    def test_unknown_customer_raises(self, db_session):
        with pytest.raises(ValueError, match="not found"):
            LedgerService(db_session).get_customer_ledger(999)

    def test_final_balance_matches_stored_balance(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "100.25", date(2024, 6, 1)))
        service.post_entry(debit(customer, "0.50", date(2024, 6, 2)))
        service.post_entry(credit(customer, "20.75", date(2024, 6, 3)))
        db_session.commit()

        lines = service.get_customer_ledger(customer.id)

        assert lines[-1].balance == customer.balance == Decimal("80.00")


class TestBalanceValidation:

    def test_consistent_balance(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "100", date(2024, 6, 1)))
        db_session.commit()

        result = service.validate_customer_balance(customer.id)

        assert result.is_consistent is True
        assert result.difference == Decimal("0")
        assert result.ledger_balance == Decimal("100")

    def test_drift_is_detected(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "100", date(2024, 6, 1)))
        customer.balance = Decimal("130")
        db_session.commit()

        result = service.validate_customer_balance(customer.id)

        assert result.is_consistent is False
        assert result.stored_balance == Decimal("130")
        assert result.difference == Decimal("30")

    def test_detect_mismatches_lists_only_drifted_customers(self, db_session):
        good = make_customer(db_session, "Good Co")
        bad = make_customer(db_session, "Bad Co")
        other = make_customer(db_session, "Other Tenant Co", OTHER_TENANT_ID)
        service = LedgerService(db_session)
        service.post_entry(debit(good, "10", date(2024, 6, 1)))
        service.post_entry(debit(bad, "10", date(2024, 6, 1)))
        bad.balance = Decimal("5")
        other.balance = Decimal("99")
        db_session.commit()

        mismatches = service.detect_balance_mismatches(TENANT_ID)

        assert [m.customer_id for m in mismatches] == [bad.id]

    def test_recalculate_fixes_drift(self, db_session):
        customer = make_customer(db_session)
        service = LedgerService(db_session)
        service.post_entry(debit(customer, "100", date(2024, 6, 1)))
        service.post_entry(credit(customer, "25", date(2024, 6, 2)))
        customer.balance = Decimal("0")
        db_session.commit()

        balance = service.recalculate_customer_balance(customer.id)
        db_session.commit()

        assert balance == Decimal("75")
        assert customer.balance == Decimal("75")
        assert service.validate_customer_balance(customer.id).is_consistent
