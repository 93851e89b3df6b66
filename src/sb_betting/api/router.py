"""sb_betting REST API — bet commands and the caller's bet feed.

Commands are queued into the round engine and applied on its next tick;
the handler awaits that tick's result. AppError raised by the engine reaches
the client through the global exception handler.
"""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from config.settings import settings
from src.sb_betting.application.schemas import BetListResponse, BetResponse, PlaceBetRequest
from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.dependencies import get_account_id, get_table
from src.sb_round.application.service import GameTableService

router = APIRouter(prefix="/bets", tags=["bets"])


@router.post("")
async def place_bet(
    body: PlaceBetRequest,
    account_id: Annotated[str, Depends(get_account_id)],
    table: Annotated[GameTableService, Depends(get_table)],
    request: Request,
) -> ApiResponse:
    bet = await asyncio.wrap_future(table.place_bet(account_id, body.stake))
    data = BetResponse.from_bet(bet, settings.CURRENCY)
    return success_response(data.model_dump(), getattr(request.state, "request_id", None))


@router.post("/cashout")
async def cash_out(
    account_id: Annotated[str, Depends(get_account_id)],
    table: Annotated[GameTableService, Depends(get_table)],
    request: Request,
) -> ApiResponse:
    bet = await asyncio.wrap_future(table.cash_out(account_id))
    data = BetResponse.from_bet(bet, settings.CURRENCY)
    return success_response(data.model_dump(), getattr(request.state, "request_id", None))


@router.get("")
async def list_bets(
    account_id: Annotated[str, Depends(get_account_id)],
    table: Annotated[GameTableService, Depends(get_table)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items to return, newest first"),
) -> ApiResponse:
    bets = table.bets(account_id, limit)
    data = BetListResponse(items=[BetResponse.from_bet(b, settings.CURRENCY) for b in bets])
    return success_response(data.model_dump(), getattr(request.state, "request_id", None))
