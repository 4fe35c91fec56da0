import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import Transaction, TransactionType, InvalidRow
from transaction_parser import parse_csv_row, read_transactions, TransactionParseError


def read(text: str):
    return list(read_transactions(io.StringIO(text)))


class TestParseCsvRow:
    def test_deposit(self):
        row = {"type": "deposit", "client": "1", "tx": "2", "amount": "1.5"}
        assert parse_csv_row(row) == Transaction(TransactionType.DEPOSIT, 1, 2, Decimal("1.5"))

    def test_trims_whitespace(self):
        row = {" type": " withdrawal ", " client": " 3", " tx": " 4 ", " amount": " 0.0001"}
        assert parse_csv_row(row) == Transaction(TransactionType.WITHDRAWAL, 3, 4, Decimal("0.0001"))

    def test_empty_amount_is_absent(self):
        row = {"type": "dispute", "client": "1", "tx": "2", "amount": ""}
        assert parse_csv_row(row).amount is None

    def test_missing_amount_column_is_absent(self):
        row = {"type": "resolve", "client": "1", "tx": "2", "amount": None}
        assert parse_csv_row(row).amount is None

    def test_id_bounds(self):
        row = {"type": "deposit", "client": "65535", "tx": "4294967295", "amount": "1"}
        transaction = parse_csv_row(row)
        assert transaction.client_id == 65535
        assert transaction.transaction_id == 4294967295

    @pytest.mark.parametrize("row", [
        {"type": "Deposit", "client": "1", "tx": "1", "amount": "1"},
        {"type": "transfer", "client": "1", "tx": "1", "amount": "1"},
        {"type": "deposit", "client": "one", "tx": "1", "amount": "1"},
        {"type": "deposit", "client": "-1", "tx": "1", "amount": "1"},
        {"type": "deposit", "client": "65536", "tx": "1", "amount": "1"},
        {"type": "deposit", "client": "1", "tx": "4294967296", "amount": "1"},
        {"type": "deposit", "client": "1", "tx": "1.0", "amount": "1"},
        {"type": "deposit", "client": "1", "tx": "1", "amount": "-5"},
        {"type": "deposit", "client": "1", "tx": "1", "amount": "abc"},
        {"type": "deposit", "client": "1", "tx": "1", "amount": "NaN"},
        {"type": "deposit", "client": "1", "tx": "1", "amount": "Infinity"},
        {"type": "deposit", "client": "1", "tx": "1", "amount": "1,5"},
        {"type": "deposit", "client": "1", "amount": "1"},
        {"type": "deposit", "client": "1", "tx": "1", "amount": "1", None: ["x"]},
    ])
    def test_rejects_malformed(self, row):
        with pytest.raises(TransactionParseError):
            parse_csv_row(row)

    def test_parse_error_is_value_error(self):
        assert issubclass(TransactionParseError, ValueError)


class TestReadTransactions:
    def test_reads_in_order(self):
        records = read("type,client,tx,amount\ndeposit,1,1,1.0\nwithdrawal,1,2,0.5\n")
        assert records == [
            Transaction(TransactionType.DEPOSIT, 1, 1, Decimal("1.0")),
            Transaction(TransactionType.WITHDRAWAL, 1, 2, Decimal("0.5")),
        ]

    def test_header_with_spaces(self):
        records = read("type, client, tx, amount\ndispute, 1, 1,\n")
        assert records == [Transaction(TransactionType.DISPUTE, 1, 1)]

    def test_row_without_trailing_amount_column(self):
        records = read("type,client,tx,amount\nchargeback,2,9\n")
        assert records == [Transaction(TransactionType.CHARGEBACK, 2, 9)]

    def test_skips_blank_lines(self):
        records = read("type,client,tx,amount\n\ndeposit,1,1,2\n\n")
        assert len(records) == 1

    def test_invalid_row_does_not_stop_stream(self):
        records = read("type,client,tx,amount\ndeposit,1,1,1\nbogus,1,2,1\ndeposit,1,3,2\n")

        assert isinstance(records[0], Transaction)
        assert isinstance(records[1], InvalidRow)
        assert records[1].line_number == 3
        assert records[1].row == ["bogus", "1", "2", "1"]
        assert "bogus" in records[1].reason
        assert records[2] == Transaction(TransactionType.DEPOSIT, 1, 3, Decimal("2"))

    def test_empty_stream(self):
        assert read("") == []

    def test_header_only(self):
        assert read("type,client,tx,amount\n") == []

    def test_is_lazy(self):
        def lines():
            yield "type,client,tx,amount\n"
            yield "deposit,1,1,1\n"
            raise AssertionError("read past the first record")

        iterator = read_transactions(lines())
        assert next(iterator).transaction_id == 1
