"""Savings withdrawal rule.

Savings accounts get extra scrutiny: one withdrawal larger than half of
the daily limit is blocked, even when the daily limit itself still has
room.
"""

from riskguard.models import AccountPolicyState, BlockReason
from riskguard.screening.rules.common import format_money


def check_savings_withdrawal(
    account: AccountPolicyState,
    amount: float,
    ratio: float = 0.5,
    currency: str = "KZT",
) -> list[BlockReason]:
    """Fire for savings accounts when amount > ratio * daily_spend_limit."""
    if account.account_type == "savings" and amount > account.daily_spend_limit * ratio:
        return [
            BlockReason(
                category="policy",
                code="SAVINGS_HIGH_WITHDRAWAL",
                label="Large Savings Withdrawal",
                description=(
                    f"Withdrawal of {format_money(amount, currency)} exceeds "
                    f"{ratio:.0%} of savings daily limit"
                ),
            )
        ]

    return []
