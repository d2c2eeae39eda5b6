from __future__ import annotations

import uuid
import contextvars
from typing import Any, Callable, Awaitable

import grpc
from structlog.contextvars import bound_contextvars


REQUEST_ID_META_KEY = "x-request-id"
_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("grpc_client_request_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


class RequestIdInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    """Tag every outgoing unary call with an ``x-request-id``.

    A caller-supplied id in the call metadata is kept; otherwise a uuid4 is
    generated. The id is bound to the structlog context for the duration of
    the call so downstream log lines carry it.
    """

    async def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.aio.ClientCallDetails, Any], Awaitable[Any]],
        client_call_details: grpc.aio.ClientCallDetails,
        request: Any,
    ) -> Any:
        md = list(client_call_details.metadata or ())
        request_id = None
        for key, value in md:
            if key == REQUEST_ID_META_KEY:
                request_id = value
                break
        if not request_id:
            request_id = str(uuid.uuid4())
            md.append((REQUEST_ID_META_KEY, request_id))

        details = grpc.aio.ClientCallDetails(
            method=client_call_details.method,
            timeout=client_call_details.timeout,
            metadata=grpc.aio.Metadata(*md),
            credentials=client_call_details.credentials,
            wait_for_ready=client_call_details.wait_for_ready,
        )

        token = _request_id_var.set(request_id)
        try:
            with bound_contextvars(request_id=request_id):
                return await continuation(details, request)
        finally:
            _request_id_var.reset(token)
