import csv
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, List, TextIO

from models import ClientAccount, LEDGER_CONTEXT

HEADER = ["client", "available", "held", "total", "locked"]

FOUR_PLACES = Decimal("0.0001")


def format_amount(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    quantized = value.quantize(FOUR_PLACES, rounding=ROUND_HALF_EVEN, context=LEDGER_CONTEXT)
    if quantized.is_zero():
        quantized = quantized.copy_abs()
    return f"{quantized:f}"


def account_rows(accounts: Dict[int, ClientAccount]) -> List[List[str]]:
    """One output row per account, sorted by client id."""
    rows = []
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        rows.append([
            str(client_id),
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ])
    return rows


def write_report(accounts: Dict[int, ClientAccount], out: TextIO) -> None:
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(HEADER)
    writer.writerows(account_rows(accounts))
