from .request_id import RequestIdInterceptor, get_request_id, REQUEST_ID_META_KEY
from .logging import LoggingInterceptor


def default_interceptors() -> list:
    # Order matters: the request id must be bound before the call is logged
    return [RequestIdInterceptor(), LoggingInterceptor()]


__all__ = [
    "RequestIdInterceptor",
    "LoggingInterceptor",
    "REQUEST_ID_META_KEY",
    "default_interceptors",
    "get_request_id",
]
