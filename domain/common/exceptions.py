"""领域层业务异常定义，供服务层与 gRPC 适配层使用。

gRPC 状态码到业务码的映射放在 grpc_app.mappers.errors，领域层不依赖 grpc。
"""
from __future__ import annotations

from typing import Any, Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        super().__init__(self.message)


class ConfigurationException(BusinessException):
    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(
            code=BusinessCode.CONFIGURATION_ERROR,
            message=message,
            error_type="ConfigurationError",
            field=field,
            message_key="config.invalid",
        )


class SpeechStreamClosedException(BusinessException):
    def __init__(self, message: str = "Speech stream is closed"):
        super().__init__(
            code=BusinessCode.STREAM_CLOSED,
            message=message,
            error_type="SpeechStreamClosed",
            message_key="speech.stream.closed",
        )


class CloudServiceException(BusinessException):
    """A cloud RPC finished with a non-OK status.

    ``status_code`` keeps the original transport status (a ``grpc.StatusCode``
    when raised from the gRPC layer) while ``code`` carries the business code.
    """

    def __init__(
        self,
        code: int,
        message: str,
        *,
        status_code: Any = None,
        method: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            error_type="CloudServiceError",
            details=details,
            message_key="cloud.rpc.failed",
        )
        self.status_code = status_code
        self.method = method

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"Status: {self.status_code}")
        if self.method:
            parts.append(f"Method: {self.method}")
        return " | ".join(parts)
