"""Transfer submission and history endpoints."""

from typing import List

from fastapi import APIRouter, HTTPException, Request, Response, status

from riskguard.errors import AccountNotFound, InvalidRequest
from riskguard.models import StoredTransaction, TransactionCreate, TransactionResult
from riskguard.services.transactions import TransactionService

router = APIRouter(prefix="/api")


def _get_service(request: Request) -> TransactionService:
    """Retrieve the transaction service from application state."""
    return request.app.state.service


@router.post(
    "/transactions",
    response_model=TransactionResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    payload: TransactionCreate,
    request: Request,
    response: Response,
) -> TransactionResult:
    """Submit a transfer for evaluation.

    Returns 201 when the transfer is allowed and committed. A blocked
    transfer is still a successful evaluation: the same body comes back
    with status 403 and the decision's block reasons.
    """
    service = _get_service(request)
    try:
        result = service.create_transaction(payload)
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AccountNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    if result.blocked:
        response.status_code = status.HTTP_403_FORBIDDEN
    return result


@router.get("/transactions/{user_id}", response_model=List[StoredTransaction])
async def get_user_transactions(
    user_id: str,
    request: Request,
) -> List[StoredTransaction]:
    """All of a user's transfers, blocked ones included, newest first."""
    return _get_service(request).get_user_transactions(user_id)
