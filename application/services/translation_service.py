"""
翻译服务 - Cloud Translation v3 文本翻译 / 语言检测 / 语言列表 / 术语表列表
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

import grpc
from google.cloud import translate_v3

from application.ports.completion import CompletionHandler, deliver
from application.ports.token_provider import TokenProvider
from application.services.token_service import TokenService
from core.config import TranslationSettings, settings
from core.logging_config import get_logger
from domain.common.exceptions import ConfigurationException
from grpc_app.channel import create_channel
from grpc_app.interceptors import REQUEST_ID_META_KEY, default_interceptors
from grpc_app.mappers.errors import rpc_error_to_exception
from grpc_app.metadata import bearer_authorization, build_request_metadata
from grpc_app.stubs.translation import TRANSLATION_SERVICE, TranslationServiceStub


logger = get_logger(__name__)


@dataclass
class TranslationPreferences:
    """User-level choices, mutable at runtime (language picker, glossary toggle)."""

    source_language_code: Optional[str] = None
    target_language_code: Optional[str] = None
    glossary_enabled: bool = False

    @classmethod
    def from_settings(cls, translation: TranslationSettings) -> "TranslationPreferences":
        return cls(
            source_language_code=translation.source_language_code,
            target_language_code=translation.target_language_code,
            glossary_enabled=translation.glossary_enabled,
        )


def _default_channel_factory(host: str) -> grpc.aio.Channel:
    return create_channel(host, interceptors=default_interceptors())


class TextToTranslationService:
    """
    文本翻译服务

    Every operation builds its request from settings and preferences,
    attaches the authorization and bundle-identifier headers, runs one unary
    RPC and forwards ``(response, None)`` or ``(None, error)`` to the
    completion handler. The response (or ``None`` on error) is returned too.
    A ``request_id`` keyword is sent as ``x-request-id`` instead of a
    generated one, so a caller can correlate its own logs with the call.
    """

    DEFAULT_SOURCE_LANGUAGE = "en-US"
    DEFAULT_TARGET_LANGUAGE = "sr-Latn"

    _shared: Optional["TextToTranslationService"] = None
    _shared_lock = threading.Lock()

    def __init__(
        self,
        *,
        host: Optional[str] = None,
        auth_token: str = "",
        token_provider: Optional[TokenProvider] = None,
        bundle_identifier: Optional[str] = None,
        translation_settings: Optional[TranslationSettings] = None,
        preferences: Optional[TranslationPreferences] = None,
        channel_factory: Callable[[str], grpc.aio.Channel] = _default_channel_factory,
    ) -> None:
        self._translation = translation_settings or settings.translation
        self._host = host or self._translation.host
        self.auth_token = auth_token
        self._token_provider = token_provider or TokenService.shared()
        self._bundle_identifier = (
            settings.BUNDLE_IDENTIFIER if bundle_identifier is None else bundle_identifier
        )
        self.preferences = preferences or TranslationPreferences.from_settings(self._translation)
        self._channel_factory = channel_factory
        self._channel: Optional[grpc.aio.Channel] = None
        self._stub: Optional[TranslationServiceStub] = None

    @classmethod
    def shared(cls) -> "TextToTranslationService":
        if cls._shared is None:
            with cls._shared_lock:
                if cls._shared is None:
                    cls._shared = cls()
        return cls._shared

    # ---- request building ----

    @property
    def parent(self) -> str:
        if not self._translation.project_id:
            raise ConfigurationException(
                "Translation project id is not configured (TRANSLATION__PROJECT_ID)",
                field="translation.project_id",
            )
        return f"projects/{self._translation.project_id}/locations/{self._translation.location_id}"

    @property
    def glossary_name(self) -> str:
        if not self._translation.glossary_id:
            raise ConfigurationException(
                "Glossary id is not configured (TRANSLATION__GLOSSARY_ID)",
                field="translation.glossary_id",
            )
        return f"{self.parent}/glossaries/{self._translation.glossary_id}"

    def authorization(self) -> str:
        # An explicitly assigned token wins over the shared token holder
        if self.auth_token:
            return bearer_authorization(self.auth_token)
        return self._token_provider.authorization()

    def _metadata(self, request_id: Optional[str] = None) -> tuple[tuple[str, str], ...]:
        extra = [(REQUEST_ID_META_KEY, request_id)] if request_id else None
        return build_request_metadata(self.authorization(), self._bundle_identifier, extra)

    def build_translate_text_request(
        self,
        text: str,
        *,
        source_language_code: Optional[str] = None,
        target_language_code: Optional[str] = None,
    ) -> translate_v3.TranslateTextRequest:
        request = translate_v3.TranslateTextRequest(
            contents=[text],
            mime_type=self._translation.mime_type,
            source_language_code=(
                source_language_code
                or self.preferences.source_language_code
                or self.DEFAULT_SOURCE_LANGUAGE
            ),
            target_language_code=(
                target_language_code
                or self.preferences.target_language_code
                or self.DEFAULT_TARGET_LANGUAGE
            ),
            parent=self.parent,
        )
        if self.preferences.glossary_enabled:
            request.glossary_config = translate_v3.TranslateTextGlossaryConfig(
                glossary=self.glossary_name,
            )
        return request

    # ---- transport ----

    def _get_stub(self) -> TranslationServiceStub:
        if self._stub is None:
            self._channel = self._channel_factory(self._host)
            self._stub = TranslationServiceStub(self._channel)
        return self._stub

    async def _invoke(
        self,
        name: str,
        request: Any,
        completion: Optional[CompletionHandler],
        request_id: Optional[str] = None,
    ) -> Optional[Any]:
        rpc = getattr(self._get_stub(), name)
        method = f"/{TRANSLATION_SERVICE}/{name}"
        try:
            response = await rpc(request, metadata=self._metadata(request_id))
        except grpc.RpcError as exc:
            error = rpc_error_to_exception(exc, method=method)
            logger.warning(
                "translation_rpc_error",
                method=method,
                status=str(error.status_code),
                message=error.message,
            )
            await deliver(completion, None, error)
            return None
        logger.debug("translation_rpc_response", method=method)
        await deliver(completion, response, None)
        return response

    # ---- operations ----

    async def text_to_translation(
        self,
        text: str,
        completion: Optional[CompletionHandler] = None,
        *,
        source_language_code: Optional[str] = None,
        target_language_code: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Optional[translate_v3.TranslateTextResponse]:
        request = self.build_translate_text_request(
            text,
            source_language_code=source_language_code,
            target_language_code=target_language_code,
        )
        logger.info(
            "translate_text",
            source=request.source_language_code,
            target=request.target_language_code,
            glossary=bool(request.glossary_config.glossary),
            chars=len(text),
        )
        return await self._invoke("TranslateText", request, completion, request_id)

    async def detect_language(
        self,
        text: str,
        completion: Optional[CompletionHandler] = None,
        *,
        request_id: Optional[str] = None,
    ) -> Optional[translate_v3.DetectLanguageResponse]:
        request = translate_v3.DetectLanguageRequest(
            parent=self.parent,
            content=text,
            mime_type=self._translation.mime_type,
        )
        return await self._invoke("DetectLanguage", request, completion, request_id)

    async def get_language_codes(
        self,
        completion: Optional[CompletionHandler] = None,
        *,
        display_language_code: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Optional[translate_v3.SupportedLanguages]:
        request = translate_v3.GetSupportedLanguagesRequest(parent=self.parent)
        if display_language_code:
            request.display_language_code = display_language_code
        return await self._invoke("GetSupportedLanguages", request, completion, request_id)

    async def get_list_of_glossary(
        self,
        completion: Optional[CompletionHandler] = None,
        *,
        page_token: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> Optional[translate_v3.ListGlossariesResponse]:
        request = translate_v3.ListGlossariesRequest(parent=self.parent)
        if page_token:
            request.page_token = page_token
        return await self._invoke("ListGlossaries", request, completion, request_id)

    async def close(self) -> None:
        if self._channel is not None:
            await self._channel.close()
        self._channel = None
        self._stub = None
