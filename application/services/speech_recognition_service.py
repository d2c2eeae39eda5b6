"""
语音识别服务 - 将音频块流式发送到 Speech-to-Text StreamingRecognize
"""
from __future__ import annotations

import asyncio
import threading
from typing import Callable, Optional

import grpc
from google.cloud import speech_v1

from application.ports.completion import CompletionHandler, deliver
from application.ports.token_provider import TokenProvider
from application.services.token_service import TokenService
from core.config import SpeechSettings, settings
from core.logging_config import get_logger
from domain.common.exceptions import SpeechStreamClosedException
from grpc_app.channel import create_channel
from grpc_app.mappers.errors import rpc_error_to_exception
from grpc_app.metadata import build_request_metadata, redact_metadata
from grpc_app.stubs.speech import SPEECH_SERVICE, SpeechStub


logger = get_logger(__name__)

STREAMING_RECOGNIZE_METHOD = f"/{SPEECH_SERVICE}/StreamingRecognize"


class SpeechRecognitionService:
    """
    流式语音识别

    The first audio chunk opens a bidirectional StreamingRecognize call,
    sends the recognition config and then every chunk as raw audio content.
    Each server response (interim and final results) is handed to the
    completion handler passed with the chunk that opened the stream; a
    terminal RPC error is handed over as a CloudServiceException.
    """

    _shared: Optional["SpeechRecognitionService"] = None
    _shared_lock = threading.Lock()

    def __init__(
        self,
        *,
        host: Optional[str] = None,
        token_provider: Optional[TokenProvider] = None,
        bundle_identifier: Optional[str] = None,
        speech_settings: Optional[SpeechSettings] = None,
        channel_factory: Callable[[str], grpc.aio.Channel] = create_channel,
    ) -> None:
        self._speech = speech_settings or settings.speech
        self.sample_rate: int = self._speech.sample_rate_hertz
        self._host = host or self._speech.host
        self._token_provider = token_provider or TokenService.shared()
        self._bundle_identifier = (
            settings.BUNDLE_IDENTIFIER if bundle_identifier is None else bundle_identifier
        )
        self._channel_factory = channel_factory

        self._streaming = False
        self._channel: Optional[grpc.aio.Channel] = None
        self._stub: Optional[SpeechStub] = None
        self._call: Optional[grpc.aio.StreamStreamCall] = None
        self._readers: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()

    @classmethod
    def shared(cls) -> "SpeechRecognitionService":
        if cls._shared is None:
            with cls._shared_lock:
                if cls._shared is None:
                    cls._shared = cls()
        return cls._shared

    def authorization(self) -> str:
        return self._token_provider.authorization()

    def is_streaming(self) -> bool:
        return self._streaming

    def _config_request(self) -> speech_v1.StreamingRecognizeRequest:
        recognition_config = speech_v1.RecognitionConfig(
            encoding=speech_v1.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=int(self.sample_rate),
            language_code=self._speech.language_code,
            max_alternatives=self._speech.max_alternatives,
            enable_word_time_offsets=self._speech.enable_word_time_offsets,
        )
        streaming_config = speech_v1.StreamingRecognitionConfig(
            config=recognition_config,
            single_utterance=self._speech.single_utterance,
            interim_results=self._speech.interim_results,
        )
        return speech_v1.StreamingRecognizeRequest(streaming_config=streaming_config)

    def _open_stream(self, completion: CompletionHandler) -> grpc.aio.StreamStreamCall:
        if self._channel is None:
            self._channel = self._channel_factory(self._host)
            self._stub = SpeechStub(self._channel)

        metadata = build_request_metadata(self.authorization(), self._bundle_identifier)
        call = self._stub.StreamingRecognize(metadata=metadata)
        logger.info(
            "speech_stream_opened",
            host=self._host,
            sample_rate=self.sample_rate,
            headers=redact_metadata(metadata),
        )

        self._call = call
        self._streaming = True
        reader = asyncio.create_task(self._read_responses(call, completion))
        self._readers.add(reader)
        reader.add_done_callback(self._readers.discard)

        return call

    async def _read_responses(self, call: grpc.aio.StreamStreamCall, completion: CompletionHandler) -> None:
        count = 0
        try:
            async for response in call:
                count += 1
                await deliver(completion, response, None)
            logger.info("speech_stream_finished", responses=count)
        except grpc.RpcError as exc:
            error = rpc_error_to_exception(exc, method=STREAMING_RECOGNIZE_METHOD)
            logger.warning(
                "speech_stream_error",
                status=str(error.status_code),
                message=error.message,
                responses=count,
            )
            await deliver(completion, None, error)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # Raised by the completion handler; stop the stream instead of leaking the task error
            logger.error("speech_completion_failed", error=str(exc), exc_info=True)
            call.cancel()
        finally:
            if self._call is call:
                self._call = None
                self._streaming = False

    async def stream_audio_data(self, audio_data: bytes, completion: CompletionHandler) -> None:
        """Send one chunk of LINEAR16 audio, opening the stream if needed.

        ``completion`` is only bound when this chunk opens a new stream; later
        chunks of the same stream report through the first handler.
        """
        async with self._write_lock:
            call = self._call if self._streaming else None
            opening = call is None
            if opening:
                call = self._open_stream(completion)
            try:
                if opening:
                    # 首条消息必须是识别配置
                    await call.write(self._config_request())
                await call.write(speech_v1.StreamingRecognizeRequest(audio_content=bytes(audio_data)))
            except (grpc.RpcError, asyncio.InvalidStateError) as exc:
                # The server already ended the call; the reader reports its status
                if self._call is call:
                    self._call = None
                    self._streaming = False
                raise SpeechStreamClosedException(f"Speech stream already finished: {exc}") from exc
        logger.debug("speech_audio_chunk_sent", size=len(audio_data))

    async def stop_streaming(self) -> None:
        """Half-close the request stream; pending results still reach the handler."""
        if not self._streaming:
            return
        async with self._write_lock:
            call = self._call
            self._streaming = False
            if call is not None:
                try:
                    await call.done_writing()
                except asyncio.InvalidStateError:
                    logger.debug("speech_stream_already_done")
        logger.info("speech_stream_stopped")

    async def wait_until_finished(self, timeout: Optional[float] = None) -> None:
        """Wait for every open stream to deliver its last response."""
        readers = list(self._readers)
        if readers:
            await asyncio.wait(readers, timeout=timeout)

    async def close(self) -> None:
        await self.stop_streaming()
        readers = list(self._readers)
        for reader in readers:
            reader.cancel()
        if readers:
            await asyncio.gather(*readers, return_exceptions=True)
        if self._channel is not None:
            await self._channel.close()
        self._channel = None
        self._stub = None
        self._call = None
        # asyncio.Lock binds to the loop that first waits on it
        self._write_lock = asyncio.Lock()
