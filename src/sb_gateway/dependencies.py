"""FastAPI dependencies: the running game table and the calling account.

Authentication is handled upstream; the gateway trusts the X-Account-Id
header and opens the account with the sign-up balance on first sight.

Usage in any router:
    @router.get("/balance")
    async def balance(
        account_id: Annotated[str, Depends(get_account_id)],
        table: Annotated[GameTableService, Depends(get_table)],
    ): ...
"""

from typing import Annotated

from fastapi import Depends, Header, Request

from src.sb_round.application.service import GameTableService


def get_table(request: Request) -> GameTableService:
    return request.app.state.table


def get_account_id(
    table: Annotated[GameTableService, Depends(get_table)],
    x_account_id: Annotated[str, Header(min_length=1, max_length=64)],
) -> str:
    table.ensure_account(x_account_id)
    return x_account_id
