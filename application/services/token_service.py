"""
令牌服务 - 持有当前访问令牌，由外部会话层写入
"""
from __future__ import annotations

import threading
from typing import Optional

from core.config import settings
from core.logging_config import get_logger
from grpc_app.metadata import bearer_authorization


logger = get_logger(__name__)


class TokenService:
    """Process-wide holder of the OAuth access token.

    Token acquisition and refresh live outside this package; whoever owns the
    session calls :meth:`set_token` and the cloud services read it per call.
    """

    _shared: Optional["TokenService"] = None
    _shared_lock = threading.Lock()

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token
        self._lock = threading.Lock()

    @classmethod
    def shared(cls) -> "TokenService":
        if cls._shared is None:
            with cls._shared_lock:
                if cls._shared is None:
                    cls._shared = cls(token=settings.ACCESS_TOKEN)
        return cls._shared

    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._token

    def set_token(self, token: Optional[str]) -> None:
        with self._lock:
            self._token = token or None
        logger.info("access_token_updated", has_token=bool(token))

    def clear(self) -> None:
        self.set_token(None)

    def authorization(self) -> str:
        return bearer_authorization(self.token)
