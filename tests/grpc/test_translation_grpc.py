import grpc
import pytest

from application.services.translation_service import TextToTranslationService, TranslationPreferences
from core.config import TranslationSettings
from domain.common.exceptions import CloudServiceException
from grpc_app.interceptors import REQUEST_ID_META_KEY, default_interceptors
from grpc_app.stubs.translation import TRANSLATION_SERVICE
from shared.codes import BusinessCode


pytestmark = pytest.mark.asyncio


@pytest.fixture
async def translation_backend(translation_server, plaintext_channel, token_provider):
    target, servicer = await translation_server()
    service = TextToTranslationService(
        host=target,
        token_provider=token_provider("shared-token"),
        bundle_identifier="com.example.app",
        translation_settings=TranslationSettings(project_id="demo-project", glossary_id="terms"),
        channel_factory=lambda host: plaintext_channel(host, interceptors=default_interceptors()),
    )
    try:
        yield service, servicer
    finally:
        await service.close()


async def test_translate_text_sends_headers_and_forwards_response(translation_backend):
    service, servicer = translation_backend
    service.preferences = TranslationPreferences(
        source_language_code="en-US", target_language_code="sr-Latn", glossary_enabled=True
    )
    received = []

    response = await service.text_to_translation("Good morning", lambda r, e: received.append((r, e)))

    assert response is not None
    assert response.translations[0].translated_text == "[sr-Latn] Good morning"
    assert received == [(response, None)]

    name, request, metadata = servicer.requests[0]
    assert name == "TranslateText"
    assert list(request.contents) == ["Good morning"]
    assert request.mime_type == "text/plain"
    assert request.parent == "projects/demo-project/locations/us-central1"
    assert request.glossary_config.glossary == "projects/demo-project/locations/us-central1/glossaries/terms"
    assert metadata["authorization"] == "Bearer shared-token"
    assert metadata["x-ios-bundle-identifier"] == "com.example.app"
    assert metadata[REQUEST_ID_META_KEY]


async def test_auth_token_attribute_overrides_shared_token(translation_backend):
    service, servicer = translation_backend
    service.auth_token = "Bearer per-service"

    await service.detect_language("Dobro jutro")

    name, request, metadata = servicer.requests[0]
    assert name == "DetectLanguage"
    assert request.content == "Dobro jutro"
    assert metadata["authorization"] == "Bearer per-service"


async def test_get_language_codes(translation_backend):
    service, servicer = translation_backend
    received = []

    async def completion(response, error):
        received.append((response, error))

    response = await service.get_language_codes(completion, display_language_code="en")

    assert [lang.language_code for lang in response.languages] == ["en", "sr-Latn"]
    assert received[0][1] is None
    _, request, _ = servicer.requests[0]
    assert request.parent == "projects/demo-project/locations/us-central1"
    assert request.display_language_code == "en"


async def test_list_glossaries_error_is_forwarded(translation_backend):
    service, servicer = translation_backend
    received = []

    response = await service.get_list_of_glossary(lambda r, e: received.append((r, e)))

    assert response is None
    assert len(received) == 1
    assert received[0][0] is None
    error = received[0][1]
    assert isinstance(error, CloudServiceException)
    assert error.status_code == grpc.StatusCode.NOT_FOUND
    assert error.code == BusinessCode.NOT_FOUND
    assert error.message == "Location not found"
    assert error.method == f"/{TRANSLATION_SERVICE}/ListGlossaries"


async def test_caller_request_id_reaches_server_unchanged(translation_backend):
    service, servicer = translation_backend

    await service.detect_language("Dobro jutro", request_id="req-42")
    await service.detect_language("Dobro jutro")

    _, _, supplied = servicer.requests[0]
    _, _, generated = servicer.requests[1]
    assert supplied[REQUEST_ID_META_KEY] == "req-42"
    assert generated[REQUEST_ID_META_KEY]
    assert generated[REQUEST_ID_META_KEY] != "req-42"
