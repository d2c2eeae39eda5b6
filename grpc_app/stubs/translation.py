"""Stub for google.cloud.translation.v3.TranslationService."""
from google.cloud import translate_v3


TRANSLATION_SERVICE = "google.cloud.translation.v3.TranslationService"


class TranslationServiceStub(object):
    """Provides natural language translation operations."""

    def __init__(self, channel):
        """Constructor.

        Args:
            channel: A grpc.aio.Channel.
        """
        self.TranslateText = channel.unary_unary(
                f"/{TRANSLATION_SERVICE}/TranslateText",
                request_serializer=translate_v3.TranslateTextRequest.serialize,
                response_deserializer=translate_v3.TranslateTextResponse.deserialize,
                )
        self.DetectLanguage = channel.unary_unary(
                f"/{TRANSLATION_SERVICE}/DetectLanguage",
                request_serializer=translate_v3.DetectLanguageRequest.serialize,
                response_deserializer=translate_v3.DetectLanguageResponse.deserialize,
                )
        self.GetSupportedLanguages = channel.unary_unary(
                f"/{TRANSLATION_SERVICE}/GetSupportedLanguages",
                request_serializer=translate_v3.GetSupportedLanguagesRequest.serialize,
                response_deserializer=translate_v3.SupportedLanguages.deserialize,
                )
        self.ListGlossaries = channel.unary_unary(
                f"/{TRANSLATION_SERVICE}/ListGlossaries",
                request_serializer=translate_v3.ListGlossariesRequest.serialize,
                response_deserializer=translate_v3.ListGlossariesResponse.deserialize,
                )
