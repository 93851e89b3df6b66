"""Request logging middleware.

Every HTTP request gets a short request ID (also exposed on request.state so
handlers put it into ApiResponse) and one log line on completion:

    INFO [POST] /api/v1/bets/cashout → 200 (51ms) acct=alice req_a1b2c3d4e5f6

Bet commands wait for the next engine tick, so their latency is roughly one
tick interval.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sb.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"
        account_id = request.headers.get("x-account-id", "-")

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "[%s] %s → %d (%.0fms) acct=%s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            account_id,
            request.state.request_id,
        )
        return response
