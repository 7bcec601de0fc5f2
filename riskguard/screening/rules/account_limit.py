"""Per-transaction limit rule."""

from riskguard.models import AccountPolicyState, BlockReason
from riskguard.screening.rules.common import format_money


def check_account_limit(
    account: AccountPolicyState,
    amount: float,
    currency: str = "KZT",
) -> list[BlockReason]:
    """Fire when a single transfer is larger than per_transaction_limit."""
    if amount > account.per_transaction_limit:
        return [
            BlockReason(
                category="policy",
                code="ACCOUNT_LIMIT_EXCEEDED",
                label="Exceeded Account Limit",
                description=(
                    f"Single transaction limit of "
                    f"{format_money(account.per_transaction_limit, currency)} exceeded"
                ),
            )
        ]

    return []
