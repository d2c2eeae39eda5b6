from __future__ import annotations

from typing import Optional, Sequence

import grpc

from core.config import GrpcChannelSettings, settings
from core.logging_config import get_logger


logger = get_logger(__name__)


def _read_optional(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    with open(path, "rb") as f:
        return f.read()


def _channel_options(grpc_settings: GrpcChannelSettings) -> list[tuple[str, object]]:
    options: list[tuple[str, object]] = []
    if grpc_settings.max_send_message_length > 0:
        options.append(("grpc.max_send_message_length", grpc_settings.max_send_message_length))
    if grpc_settings.max_receive_message_length > 0:
        options.append(("grpc.max_receive_message_length", grpc_settings.max_receive_message_length))
    if grpc_settings.user_agent:
        options.append(("grpc.primary_user_agent", grpc_settings.user_agent))
    return options


def create_channel(
    host: str,
    *,
    interceptors: Optional[Sequence[grpc.aio.ClientInterceptor]] = None,
    grpc_settings: Optional[GrpcChannelSettings] = None,
) -> grpc.aio.Channel:
    """Open an asyncio channel to ``host`` (``name:port``).

    Call credentials are not attached here: every service sends its own
    ``authorization`` header per call.
    """
    grpc_settings = grpc_settings or settings.grpc
    options = _channel_options(grpc_settings)
    tls = grpc_settings.tls

    if tls.enabled:
        if bool(tls.cert) != bool(tls.key):
            raise RuntimeError("GRPC TLS client cert and key must be provided together")
        creds = grpc.ssl_channel_credentials(
            root_certificates=_read_optional(tls.ca),
            private_key=_read_optional(tls.key),
            certificate_chain=_read_optional(tls.cert),
        )
        logger.debug("grpc_channel_open", host=host, tls=True)
        return grpc.aio.secure_channel(host, creds, options=options, interceptors=interceptors)

    logger.debug("grpc_channel_open", host=host, tls=False)
    return grpc.aio.insecure_channel(host, options=options, interceptors=interceptors)
