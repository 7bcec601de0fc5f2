"""Security log and threat status endpoints."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query, Request

from riskguard.models import SecurityLogEntry, SecurityStatus
from riskguard.services.security import get_security_status
from riskguard.storage.memory import MemoryStore

router = APIRouter(prefix="/api/security")


def _get_store(request: Request) -> MemoryStore:
    return request.app.state.store


@router.get("/logs", response_model=List[SecurityLogEntry])
async def get_security_logs(
    request: Request,
    transaction_id: Optional[str] = Query(default=None),
    from_date: Optional[datetime] = Query(default=None),
    to_date: Optional[datetime] = Query(default=None),
) -> List[SecurityLogEntry]:
    """Retrieve security log entries with optional filters.

    Filters:
      - transaction_id: exact match on a specific transaction
      - from_date: entries with timestamp >= this value
      - to_date: entries with timestamp <= this value
    """
    return _get_store(request).get_security_logs(
        transaction_id=transaction_id,
        since=from_date,
        until=to_date,
    )


@router.get("/status/{user_id}", response_model=SecurityStatus)
async def get_status(user_id: str, request: Request) -> SecurityStatus:
    """Threat level and outcome counts for a user."""
    service = request.app.state.service
    return get_security_status(_get_store(request), user_id, now=service.clock())
