from __future__ import annotations

import time
from typing import Any, Callable, Awaitable

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.request_id import get_request_id


logger = get_logger(__name__)


def _method_name(method: Any) -> str:
    if isinstance(method, bytes):
        return method.decode("utf-8", "replace")
    return str(method)


class LoggingInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    async def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.aio.ClientCallDetails, Any], Awaitable[Any]],
        client_call_details: grpc.aio.ClientCallDetails,
        request: Any,
    ) -> Any:
        method = _method_name(client_call_details.method)
        start = time.perf_counter()
        logger.info("grpc_client_call", method=method, request_id=get_request_id())
        call = await continuation(client_call_details, request)
        status = grpc.StatusCode.OK
        try:
            # Wait for completion so the elapsed time covers the whole call
            await call
        except grpc.RpcError as exc:
            status = exc.code()  # type: ignore[attr-defined]
            # The caller receives the error from the returned call
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "grpc_client_call_done",
                method=method,
                status=str(status),
                elapsed_ms=round(elapsed_ms, 2),
                request_id=get_request_id(),
            )
        return call
