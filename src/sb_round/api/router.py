"""sb_round REST API — read-only view of the running table."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.sb_common.response import ApiResponse, success_response
from src.sb_gateway.dependencies import get_table
from src.sb_round.application.schemas import HistoryResponse, SnapshotResponse
from src.sb_round.application.service import GameTableService

router = APIRouter(prefix="/round", tags=["round"])


@router.get("")
async def get_snapshot(
    table: Annotated[GameTableService, Depends(get_table)],
    request: Request,
) -> ApiResponse:
    data = SnapshotResponse.from_snapshot(table.snapshot())
    return success_response(data.model_dump(), getattr(request.state, "request_id", None))


@router.get("/history")
async def get_history(
    table: Annotated[GameTableService, Depends(get_table)],
    request: Request,
) -> ApiResponse:
    data = HistoryResponse.from_history(table.history(), table.history_stats())
    return success_response(data.model_dump(), getattr(request.state, "request_id", None))
