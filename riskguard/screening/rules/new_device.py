"""Device trust rule.

A transfer that names an originating device other than the account's
trusted one is flagged. Requests that carry no device id are not
checked.
"""

from typing import Optional

from riskguard.models import BlockReason


def check_new_device(
    device_id: Optional[str],
    trusted_device_id: Optional[str],
) -> list[BlockReason]:
    """Fire when device_id is present and differs from trusted_device_id."""
    if device_id and device_id != trusted_device_id:
        return [
            BlockReason(
                category="policy",
                code="NEW_DEVICE",
                label="New Device Detected",
                description=(
                    f"Transaction initiated from an unrecognized device ({device_id})"
                ),
            )
        ]

    return []
