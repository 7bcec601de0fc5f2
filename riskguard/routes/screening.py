"""Dry-run screening endpoint."""

from fastapi import APIRouter, HTTPException, Request

from riskguard.errors import AccountNotFound, InvalidRequest
from riskguard.models import Decision, TransactionCreate
from riskguard.services.transactions import TransactionService

router = APIRouter(prefix="/api")


def _get_service(request: Request) -> TransactionService:
    return request.app.state.service


@router.post("/screening", response_model=Decision)
async def screen_transaction(
    payload: TransactionCreate,
    request: Request,
) -> Decision:
    """Evaluate a transfer against current account state without committing it.

    Nothing is persisted and no balance changes, so the same payload can be
    screened repeatedly.
    """
    try:
        return _get_service(request).screen(payload)
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AccountNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
