"""Suspicious hour rule.

Transfers started in the middle of the night, bank local time, are a
common sign of account takeover. The bank's clock is a fixed UTC offset
(UTC+6 by default). There is no daylight-saving or multi-region handling.
"""

from datetime import datetime, timedelta, timezone

from riskguard.models import BlockReason


def local_hour(timestamp: datetime, utc_offset_hours: int = 6) -> int:
    """Hour of day at the bank for a timestamp (naive values count as UTC)."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    bank_tz = timezone(timedelta(hours=utc_offset_hours))
    return timestamp.astimezone(bank_tz).hour


def check_suspicious_time(
    timestamp: datetime,
    utc_offset_hours: int = 6,
    start_hour: int = 0,
    end_hour: int = 6,
) -> list[BlockReason]:
    """Fire when the local hour falls in [start_hour, end_hour)."""
    hour = local_hour(timestamp, utc_offset_hours)

    if start_hour <= hour < end_hour:
        return [
            BlockReason(
                category="policy",
                code="SUSPICIOUS_TIME",
                label="Suspicious Time",
                description=(
                    f"Transaction initiated during unusual hours "
                    f"({hour:02d}:00 local time)"
                ),
            )
        ]

    return []
