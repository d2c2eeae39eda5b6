import grpc
import pytest
from google.cloud import speech_v1, translate_v3

from core.config import GrpcChannelSettings, GrpcTlsSettings
from grpc_app.channel import create_channel
from grpc_app.metadata import bearer_authorization
from grpc_app.stubs.speech import SPEECH_SERVICE
from grpc_app.stubs.translation import TRANSLATION_SERVICE


class StaticTokenProvider:
    def __init__(self, token: str | None) -> None:
        self.token = token

    def authorization(self) -> str:
        return bearer_authorization(self.token)


_PLAINTEXT = GrpcChannelSettings(tls=GrpcTlsSettings(enabled=False))


def _result(transcript: str, is_final: bool) -> speech_v1.StreamingRecognizeResponse:
    return speech_v1.StreamingRecognizeResponse(
        results=[
            speech_v1.StreamingRecognitionResult(
                alternatives=[speech_v1.SpeechRecognitionAlternative(transcript=transcript)],
                is_final=is_final,
            )
        ]
    )


class FakeSpeech:
    """Echoes one interim result per audio chunk and a final result on half-close."""

    def __init__(self, abort_after: int | None = None, abort_status: grpc.StatusCode | None = None):
        self.calls: list[tuple[dict, list]] = []
        self.abort_after = abort_after
        self.abort_status = abort_status

    async def StreamingRecognize(self, request_iterator, context):
        metadata = dict(context.invocation_metadata())
        requests: list = []
        self.calls.append((metadata, requests))
        async for request in request_iterator:
            requests.append(request)
            if self.abort_status is not None and len(requests) >= self.abort_after:
                await context.abort(self.abort_status, "Request had invalid authentication credentials.")
            if request.audio_content:
                yield _result(f"partial {len(requests) - 1}", is_final=False)
        yield _result("hello world", is_final=True)


def speech_handler(servicer: FakeSpeech):
    return grpc.method_handlers_generic_handler(
        SPEECH_SERVICE,
        {
            "StreamingRecognize": grpc.stream_stream_rpc_method_handler(
                servicer.StreamingRecognize,
                request_deserializer=speech_v1.StreamingRecognizeRequest.deserialize,
                response_serializer=speech_v1.StreamingRecognizeResponse.serialize,
            )
        },
    )


class FakeTranslationService:
    def __init__(self):
        self.requests: list[tuple[str, object, dict]] = []

    def _record(self, name, request, context):
        self.requests.append((name, request, dict(context.invocation_metadata())))

    async def TranslateText(self, request, context):
        self._record("TranslateText", request, context)
        return translate_v3.TranslateTextResponse(
            translations=[translate_v3.Translation(translated_text=f"[{request.target_language_code}] {request.contents[0]}")]
        )

    async def DetectLanguage(self, request, context):
        self._record("DetectLanguage", request, context)
        return translate_v3.DetectLanguageResponse(
            languages=[translate_v3.DetectedLanguage(language_code="sr-Latn", confidence=0.9)]
        )

    async def GetSupportedLanguages(self, request, context):
        self._record("GetSupportedLanguages", request, context)
        return translate_v3.SupportedLanguages(
            languages=[
                translate_v3.SupportedLanguage(language_code="en", display_name="English"),
                translate_v3.SupportedLanguage(language_code="sr-Latn", display_name="Serbian (Latin)"),
            ]
        )

    async def ListGlossaries(self, request, context):
        self._record("ListGlossaries", request, context)
        await context.abort(grpc.StatusCode.NOT_FOUND, "Location not found")


def translation_handler(servicer: FakeTranslationService):
    def unary(fn, request_type, response_type):
        return grpc.unary_unary_rpc_method_handler(
            fn,
            request_deserializer=request_type.deserialize,
            response_serializer=response_type.serialize,
        )

    return grpc.method_handlers_generic_handler(
        TRANSLATION_SERVICE,
        {
            "TranslateText": unary(
                servicer.TranslateText, translate_v3.TranslateTextRequest, translate_v3.TranslateTextResponse
            ),
            "DetectLanguage": unary(
                servicer.DetectLanguage, translate_v3.DetectLanguageRequest, translate_v3.DetectLanguageResponse
            ),
            "GetSupportedLanguages": unary(
                servicer.GetSupportedLanguages, translate_v3.GetSupportedLanguagesRequest, translate_v3.SupportedLanguages
            ),
            "ListGlossaries": unary(
                servicer.ListGlossaries, translate_v3.ListGlossariesRequest, translate_v3.ListGlossariesResponse
            ),
        },
    )


@pytest.fixture
def token_provider():
    return StaticTokenProvider


@pytest.fixture
def plaintext_channel():
    def _factory(host: str, interceptors=None) -> grpc.aio.Channel:
        return create_channel(host, interceptors=interceptors, grpc_settings=_PLAINTEXT)
    return _factory


@pytest.fixture
async def start_server():
    """Start in-process gRPC servers on ephemeral ports (port 0).

    Call it with generic handlers; it returns the ``host:port`` target.
    """
    servers: list[grpc.aio.Server] = []

    async def _start(*generic_handlers) -> str:
        server = grpc.aio.server()
        server.add_generic_rpc_handlers(tuple(generic_handlers))
        port = server.add_insecure_port("127.0.0.1:0")
        await server.start()
        servers.append(server)
        return f"127.0.0.1:{port}"

    try:
        yield _start
    finally:
        for server in servers:
            await server.stop(grace=None)


@pytest.fixture
def speech_server(start_server):
    """Start a ``FakeSpeech``; returns ``(target, servicer)``."""

    async def _start(**kwargs) -> tuple[str, FakeSpeech]:
        servicer = FakeSpeech(**kwargs)
        return await start_server(speech_handler(servicer)), servicer

    return _start


@pytest.fixture
def translation_server(start_server):
    async def _start() -> tuple[str, FakeTranslationService]:
        servicer = FakeTranslationService()
        return await start_server(translation_handler(servicer)), servicer

    return _start
