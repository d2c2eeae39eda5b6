"""Client stubs for the Google Cloud services used by the app.

The google-cloud-speech / google-cloud-translate clients are not used: their
transports attach credentials once per channel, while these services send a
bearer ``authorization`` and an ``x-ios-bundle-identifier`` header with every
call, and the speech service needs the raw ``write`` / ``done_writing`` API of
a ``grpc.aio`` stream. The stubs bind the method paths on a plain channel and
reuse the libraries' proto-plus message types for (de)serialization.
"""
from .speech import SpeechStub, SPEECH_SERVICE
from .translation import TranslationServiceStub, TRANSLATION_SERVICE

__all__ = [
    "SpeechStub",
    "SPEECH_SERVICE",
    "TranslationServiceStub",
    "TRANSLATION_SERVICE",
]
