"""Stub for google.cloud.speech.v1.Speech.

Messages are the proto-plus types shipped with google-cloud-speech; only the
streaming method is bound.
"""
from google.cloud import speech_v1


SPEECH_SERVICE = "google.cloud.speech.v1.Speech"


class SpeechStub(object):
    """Service that implements Google Cloud Speech API."""

    def __init__(self, channel):
        """Constructor.

        Args:
            channel: A grpc.aio.Channel.
        """
        self.StreamingRecognize = channel.stream_stream(
                f"/{SPEECH_SERVICE}/StreamingRecognize",
                request_serializer=speech_v1.StreamingRecognizeRequest.serialize,
                response_deserializer=speech_v1.StreamingRecognizeResponse.deserialize,
                )
