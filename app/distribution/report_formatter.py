"""Plain-text money distribution report for a single friend."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from app.distribution.models import SpenderLedger

_CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Return *amount* rounded half-up to two decimal places."""
    return str(Decimal(amount).quantize(_CENTS, rounding=ROUND_HALF_UP))


def format_report(friend_name: str, ledger: SpenderLedger | None) -> str:
    lines = [
        "Friend Money Distribution",
        f"Friend: {friend_name}",
    ]

    for spender, payments in (ledger or {}).items():
        lines.append(f"Spender: {spender}")
        total_due = Decimal("0")
        for payment in payments:
            status = "Paid" if payment.paid else "Due"
            lines.append(
                f"{spender} paid for {payment.description}: {format_amount(payment.amount)} ({status})"
            )
            if not payment.paid:
                total_due += payment.amount
        lines.append(f"Total amount due by {spender}: {format_amount(total_due)}")

    return "\n".join(lines) + "\n"
