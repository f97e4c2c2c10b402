"""
Tests for the row normalizer.

Tests cover:
- Tolerant amount parsing (currency, separators, negatives)
- Locale-ambiguous date parsing
- Defaults: payment type, sales derived from netSales + vat
- Rejection of rows without an invoice number or customer name
- Warnings for values that could not be parsed
"""

from datetime import date
from decimal import Decimal

import pytest

from billing_ledger.services.column_mapping import validate_column_mapping
from billing_ledger.services.row_normalizer import (
    RowValidationError,
    normalize_row,
    parse_amount,
    parse_date,
)


FULL_MAPPING = validate_column_mapping({
    "invoiceNo": 0,
    "customerName": 1,
    "paymentType": 2,
    "paymentDate": 3,
    "netSales": 4,
    "vat": 5,
    "sales": 6,
    "discount": 7,
    "cost": 8,
})


class TestParseAmount:

    @pytest.mark.parametrize("text, expected", [
        ("100", Decimal("100")),
        ("1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("1 234,56", Decimal("1234.56")),
        ("12,5", Decimal("12.5")),
        ("1,200", Decimal("1200")),
        ("$1,200.50", Decimal("1200.50")),
        ("AED 1200", Decimal("1200")),
        ("1200 USD", Decimal("1200")),
        ("-100", Decimal("-100")),
        ("100-", Decimal("-100")),
        ("(100.25)", Decimal("-100.25")),
    ])
    def test_parses(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "abc", "N/A", "-"])
    def test_unparseable_is_none(self, text):
        assert parse_amount(text) is None


class TestParseDate:

    @pytest.mark.parametrize("text, expected", [
        ("2024-06-01", date(2024, 6, 1)),
        ("2024-06-01 13:45:00", date(2024, 6, 1)),
        ("01/06/2024", date(2024, 6, 1)),
        ("13/06/2024", date(2024, 6, 13)),
        ("06/13/2024", date(2024, 6, 13)),
        ("01-06-2024", date(2024, 6, 1)),
        ("01.06.2024", date(2024, 6, 1)),
        ("01-Jun-2024", date(2024, 6, 1)),
        ("1 June 2024", date(2024, 6, 1)),
    ])
    def test_parses(self, text, expected):
        assert parse_date(text) == expected

    @pytest.mark.parametrize("text", [None, "", "not a date", "32/13/2024"])
    def test_unparseable_is_none(self, text):
        assert parse_date(text) is None


class TestNormalizeRow:

    def test_full_row(self):
        row = ["INV-1", " Acme  Co ", "Cash", "01/06/2024",
               "100", "5", "105", "10", "60"]

        record = normalize_row(row, FULL_MAPPING, row_index=1)

        assert record.row_index == 1
        assert record.invoice_no == "INV-1"
        assert record.customer_name == "Acme Co"
        assert record.payment_type == "Cash"
        assert record.payment_date == date(2024, 6, 1)
        assert record.net_sales == Decimal("100")
        assert record.vat == Decimal("5")
        assert record.sales == Decimal("105")
        assert record.discount == Decimal("10")
        assert record.cost == Decimal("60")
        assert record.gross_amount == Decimal("95")
        assert record.warnings == []

    def test_sales_defaults_to_net_plus_vat(self):
        mapping = validate_column_mapping(
            {"invoiceNo": 0, "customerName": 1, "netSales": 2, "vat": 3}
        )

        record = normalize_row(["INV-1", "Acme", "100", "5"], mapping, 1)

        assert record.sales == Decimal("105")

    def test_blank_sales_cell_also_derives(self):
        row = ["INV-1", "Acme", "", "", "100", "5", "", "", ""]

        record = normalize_row(row, FULL_MAPPING, 1)

        assert record.sales == Decimal("105")
        assert record.warnings == []

    def test_defaults_when_only_keys_mapped(self):
        mapping = validate_column_mapping({"invoiceNo": 0, "customerName": 1})

        record = normalize_row(["INV-1", "Acme"], mapping, 1)

        assert record.payment_type == "Credit"
        assert record.payment_date is None
        assert record.net_sales == Decimal("0")
        assert record.sales == Decimal("0")
        assert record.discount == Decimal("0")

    def test_empty_invoice_no_rejected(self):
        row = ["   ", "Acme", "", "", "100", "", "", "", ""]

        with pytest.raises(RowValidationError, match="Invoice number is empty"):
            normalize_row(row, FULL_MAPPING, 1)

    def test_empty_customer_rejected(self):
        row = ["INV-1", "", "", "", "100", "", "", "", ""]

        with pytest.raises(RowValidationError, match="Customer name is empty"):
            normalize_row(row, FULL_MAPPING, 1)

    def test_bad_amount_becomes_zero_with_warning(self):
        row = ["INV-1", "Acme", "", "", "abc", "5", "", "", ""]

        record = normalize_row(row, FULL_MAPPING, 1)

        assert record.net_sales == Decimal("0")
        assert record.sales == Decimal("5")
        assert record.warnings == ["netSales value 'abc' is not a number; using 0"]

    def test_bad_sales_derives_with_warning(self):
        row = ["INV-1", "Acme", "", "", "100", "5", "lots", "", ""]

        record = normalize_row(row, FULL_MAPPING, 1)

        assert record.sales == Decimal("105")
        assert "deriving from netSales + vat" in record.warnings[0]

    def test_bad_date_is_unpaid_with_warning(self):
        row = ["INV-1", "Acme", "Cash", "someday", "100", "", "", "", ""]

        record = normalize_row(row, FULL_MAPPING, 1)

        assert record.payment_date is None
        assert record.warnings == [
            "paymentDate value 'someday' is not a date; treated as unpaid"
        ]

    def test_amounts_rounded_half_up_to_four_places(self):
        row = ["INV-1", "Acme", "", "", "100.12345", "0.00005", "", "", ""]

        record = normalize_row(row, FULL_MAPPING, 1)

        assert record.net_sales == Decimal("100.1235")
        assert record.vat == Decimal("0.0001")
        assert record.sales == Decimal("100.1236")

    def test_amount_too_large_to_round_warns(self):
        row = ["INV-1", "Acme", "", "", "1" * 30, "5", "", "", ""]

        record = normalize_row(row, FULL_MAPPING, 1)

        assert record.net_sales == Decimal("0")
        assert record.warnings == [
            f"netSales value '{'1' * 30}' is out of range; using 0"
        ]

    def test_credit_sale_detection(self):
        cash = ["INV-1", "Acme", "Cash", "", "1", "", "", "", ""]
        on_account = ["INV-2", "Acme", "", "", "1", "", "", "", ""]

        assert normalize_row(cash, FULL_MAPPING, 1).is_credit_sale is False
        assert normalize_row(on_account, FULL_MAPPING, 2).is_credit_sale is True
