from __future__ import annotations

from typing import Optional

import grpc

from domain.common.exceptions import CloudServiceException
from shared.codes import BusinessCode


_STATUS_TO_BUSINESS_CODE = {
    grpc.StatusCode.INVALID_ARGUMENT: BusinessCode.PARAM_VALIDATION_ERROR,
    grpc.StatusCode.OUT_OF_RANGE: BusinessCode.PARAM_ERROR,
    grpc.StatusCode.NOT_FOUND: BusinessCode.NOT_FOUND,
    grpc.StatusCode.ALREADY_EXISTS: BusinessCode.ALREADY_EXISTS,
    grpc.StatusCode.FAILED_PRECONDITION: BusinessCode.PRECONDITION_FAILED,
    grpc.StatusCode.UNAUTHENTICATED: BusinessCode.UNAUTHORIZED,
    grpc.StatusCode.PERMISSION_DENIED: BusinessCode.FORBIDDEN,
    grpc.StatusCode.RESOURCE_EXHAUSTED: BusinessCode.RATE_LIMIT_ERROR,
    grpc.StatusCode.UNAVAILABLE: BusinessCode.SERVICE_UNAVAILABLE,
    grpc.StatusCode.DEADLINE_EXCEEDED: BusinessCode.TIMEOUT,
    grpc.StatusCode.CANCELLED: BusinessCode.CANCELLED,
    grpc.StatusCode.ABORTED: BusinessCode.BUSINESS_ERROR,
    grpc.StatusCode.UNIMPLEMENTED: BusinessCode.SYSTEM_ERROR,
    grpc.StatusCode.INTERNAL: BusinessCode.SYSTEM_ERROR,
    grpc.StatusCode.DATA_LOSS: BusinessCode.SYSTEM_ERROR,
    grpc.StatusCode.UNKNOWN: BusinessCode.SYSTEM_ERROR,
}


def grpc_status_to_business_code(status: Optional[grpc.StatusCode]) -> BusinessCode:
    if status is None:
        return BusinessCode.SYSTEM_ERROR
    return _STATUS_TO_BUSINESS_CODE.get(status, BusinessCode.SYSTEM_ERROR)


def rpc_error_to_exception(exc: BaseException, method: Optional[str] = None) -> CloudServiceException:
    """Convert an error raised by a gRPC call into a CloudServiceException."""
    if isinstance(exc, CloudServiceException):
        return exc

    status: Optional[grpc.StatusCode] = None
    details: Optional[str] = None
    if isinstance(exc, grpc.RpcError):
        # grpc.aio.AioRpcError and sync call errors both expose code()/details()
        try:
            status = exc.code()  # type: ignore[attr-defined]
            details = exc.details()  # type: ignore[attr-defined]
        except AttributeError:
            pass

    message = details or str(exc) or exc.__class__.__name__
    return CloudServiceException(
        code=grpc_status_to_business_code(status),
        message=message,
        status_code=status,
        method=method,
        details={"status": status.name} if status is not None else None,
    )
