"""Deterministic banking policy checks.

Runs every policy rule against the account snapshot. Rules are
independent and cumulative: all that fire are reported, in a fixed
order, and none short-circuits the others.
"""

from datetime import datetime
from typing import Optional

from riskguard.models import AccountPolicyState, BlockReason, RiskModelConfig
from riskguard.screening.rules.account_limit import check_account_limit
from riskguard.screening.rules.daily_limit import check_daily_limit
from riskguard.screening.rules.new_device import check_new_device
from riskguard.screening.rules.savings_withdrawal import check_savings_withdrawal
from riskguard.screening.rules.suspicious_time import check_suspicious_time


def check_rules(
    account: AccountPolicyState,
    amount: float,
    timestamp: datetime,
    device_id: Optional[str],
    config: RiskModelConfig,
) -> list[BlockReason]:
    """Return the policy reasons for a transfer, or [] if nothing fires."""
    results = [
        check_daily_limit(account, amount, currency=config.currency),
        check_account_limit(account, amount, currency=config.currency),
        check_suspicious_time(
            timestamp,
            utc_offset_hours=config.local_utc_offset_hours,
            start_hour=config.suspicious_hour_start,
            end_hour=config.suspicious_hour_end,
        ),
        check_new_device(device_id, account.trusted_device_id),
        check_savings_withdrawal(
            account,
            amount,
            ratio=config.savings_withdrawal_ratio,
            currency=config.currency,
        ),
    ]

    reasons: list[BlockReason] = []
    for result in results:
        reasons.extend(result)
    return reasons
