"""JSON-RPC endpoint.

Served on both ``/`` and ``/mcp``. POST carries JSON-RPC messages, GET is a
liveness probe and OPTIONS acknowledges preflights.
"""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from timeserver.rpc import ErrorCode, JsonRpcResponse, RpcDispatcher
from timeserver.utils.logging_utils import log_request_rejected

from ..dependencies import enforce_rate_limit, get_dispatcher, verify_origin, verify_protocol_version

logger = logging.getLogger(__name__)

router = APIRouter()

GUARDS = [Depends(verify_origin), Depends(verify_protocol_version)]
ALLOWED_METHODS = "GET, POST, OPTIONS"
LIVENESS_MESSAGE = "MCP Server HTTP Time is running."


@router.options("/")
@router.options("/mcp")
async def preflight() -> Response:
    """Acknowledge a preflight with no body."""
    return Response(status_code=204)


@router.get("/", dependencies=GUARDS, response_class=PlainTextResponse)
@router.get("/mcp", dependencies=GUARDS, response_class=PlainTextResponse)
async def liveness() -> PlainTextResponse:
    """Static liveness string."""
    return PlainTextResponse(LIVENESS_MESSAGE)


@router.post("/", dependencies=GUARDS, response_model=None)
@router.post("/mcp", dependencies=GUARDS, response_model=None)
async def handle_rpc(
    request: Request,
    client_id: Annotated[str, Depends(enforce_rate_limit)],
    dispatcher: Annotated[RpcDispatcher, Depends(get_dispatcher)],
) -> Response:
    """Dispatch one JSON-RPC message.

    Args:
        request: The incoming request; its body is decoded here, after the
            origin, protocol-version and rate-limit checks have passed.
        client_id: Client the request was counted against.
        dispatcher: The JSON-RPC dispatcher.

    Returns:
        The JSON-RPC response, 202 with no body for notifications, or a 400
        parse error when the body is not valid JSON.
    """
    body = await request.body()

    try:
        payload = json.loads(body)
    except (ValueError, RecursionError) as e:
        log_request_rejected(logger, "parse_error", 400, client_id=client_id, detail=str(e))
        return JSONResponse(
            status_code=400,
            content=JsonRpcResponse.failure(None, ErrorCode.PARSE_ERROR, "Parse error").to_payload(),
        )

    response = dispatcher.dispatch(payload)

    if response is None:
        return Response(status_code=202)

    return JSONResponse(content=response)


@router.api_route("/", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
@router.api_route("/mcp", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
async def method_not_allowed() -> PlainTextResponse:
    return PlainTextResponse("Method Not Allowed", status_code=405, headers={"Allow": ALLOWED_METHODS})
