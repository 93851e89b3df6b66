"""Account REST API — balance and ledger of the calling account."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from config.settings import settings
from src.sb_betting.application.schemas import BalanceResponse, LedgerEntryItem, LedgerResponse
from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.dependencies import get_account_id, get_table
from src.sb_round.application.service import GameTableService

router = APIRouter(prefix="/account", tags=["account"])


@router.get("/balance")
async def get_balance(
    account_id: Annotated[str, Depends(get_account_id)],
    table: Annotated[GameTableService, Depends(get_table)],
    request: Request,
) -> ApiResponse:
    data = BalanceResponse.from_balance(account_id, table.balance(account_id), settings.CURRENCY)
    return success_response(data.model_dump(), getattr(request.state, "request_id", None))


@router.get("/ledger")
async def list_ledger(
    account_id: Annotated[str, Depends(get_account_id)],
    table: Annotated[GameTableService, Depends(get_table)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items to return, newest first"),
) -> ApiResponse:
    entries = table.ledger_entries(account_id, limit)
    data = LedgerResponse(items=[LedgerEntryItem.from_entry(e) for e in entries])
    return success_response(data.model_dump(), getattr(request.state, "request_id", None))
