"""Read-only reporting over the security log."""

from datetime import datetime, timedelta

from riskguard.models import SecurityStatus
from riskguard.storage.memory import MemoryStore

THREAT_WINDOW = timedelta(hours=1)


def threat_level(recent_threats: int) -> str:
    """Roll a count of recent suspicious entries up to a severity."""
    if recent_threats >= 5:
        return "CRITICAL"
    if recent_threats >= 3:
        return "HIGH"
    if recent_threats >= 1:
        return "MEDIUM"
    return "LOW"


def get_security_status(store: MemoryStore, user_id: str, now: datetime) -> SecurityStatus:
    """Summarize a user's transfers and the trailing hour of the security log."""
    transactions = store.get_transactions(user_id)
    logs = store.get_security_logs()

    window_start = now - THREAT_WINDOW
    recent_threats = sum(
        1 for entry in logs if entry.label == "suspicious" and entry.timestamp > window_start
    )

    blocked = [entry for entry in logs if entry.action_taken == "BLOCKED"]
    blocks_by_category = {
        category: sum(
            1 for entry in blocked
            if any(r.category == category for r in entry.block_reasons)
        )
        for category in ("behavioral", "policy")
    }

    return SecurityStatus(
        overall_threat_level=threat_level(recent_threats),
        total_transactions=len(transactions),
        blocked_transactions=sum(1 for t in transactions if t.status == "BLOCKED"),
        safe_transactions=sum(1 for t in transactions if t.status == "COMPLETED"),
        recent_threats=recent_threats,
        last_scan_time=now,
        blocks_by_category=blocks_by_category,
    )
