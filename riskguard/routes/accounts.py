"""Account lookup endpoint."""

from typing import List

from fastapi import APIRouter, Request

from riskguard.models import Account
from riskguard.storage.memory import MemoryStore

router = APIRouter(prefix="/api")


def _get_store(request: Request) -> MemoryStore:
    """Retrieve the memory store from application state."""
    return request.app.state.store


@router.get("/accounts/{user_id}", response_model=List[Account])
async def get_user_accounts(user_id: str, request: Request) -> List[Account]:
    """Return a user's accounts with current balance and daily spend."""
    return _get_store(request).get_user_accounts(user_id)
