"""Daily spend limit rule.

Blocks a transfer that would push the amount already spent today past
the account's daily limit. The check uses the snapshot handed in by the
caller; accruing the spend after an allowed transfer is the caller's job.
"""

from riskguard.models import AccountPolicyState, BlockReason
from riskguard.screening.rules.common import format_money


def check_daily_limit(
    account: AccountPolicyState,
    amount: float,
    currency: str = "KZT",
) -> list[BlockReason]:
    """Fire when amount_spent_today + amount exceeds daily_spend_limit."""
    if account.amount_spent_today + amount > account.daily_spend_limit:
        return [
            BlockReason(
                category="policy",
                code="DAILY_LIMIT_EXCEEDED",
                label="Exceeded Daily Limit",
                description=(
                    f"Daily limit of {format_money(account.daily_spend_limit, currency)} "
                    f"would be exceeded. Current spent: "
                    f"{format_money(account.amount_spent_today, currency)}"
                ),
            )
        ]

    return []
