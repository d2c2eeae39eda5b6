"""
Shared business codes used across layers (Domain/Application/gRPC).

This module provides a single source of truth to avoid drift between
multiple enum definitions scattered across the codebase.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """业务状态码定义（单一来源）"""

    # 成功
    SUCCESS = 0

    # 参数错误 (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_VALIDATION_ERROR = 10003
    CONFIGURATION_ERROR = 10004

    # 业务错误 (2xxxx)
    BUSINESS_ERROR = 20000
    TOKEN_INVALID = 20004
    NOT_FOUND = 20006
    STREAM_CLOSED = 20007
    ALREADY_EXISTS = 20008
    PRECONDITION_FAILED = 20009

    # 权限错误 (3xxxx)
    UNAUTHORIZED = 30001
    FORBIDDEN = 30002

    # 系统错误 (4xxxx)
    SYSTEM_ERROR = 40000
    NETWORK_ERROR = 40002
    SERVICE_UNAVAILABLE = 40003
    TIMEOUT = 40004
    CANCELLED = 40005

    # 限流错误 (5xxxx)
    RATE_LIMIT_ERROR = 50000


__all__ = ["BusinessCode"]
