"""
命令行入口 - 语音识别与翻译客户端
"""
from __future__ import annotations

import argparse
import asyncio
import sys
import wave
from typing import Optional, Sequence

from application.services.speech_recognition_service import SpeechRecognitionService
from application.services.token_service import TokenService
from application.services.translation_service import TextToTranslationService
from core.config import settings
from core.logging_config import configure_logging, get_logger
from domain.common.exceptions import BusinessException


configure_logging()
logger = get_logger(__name__)


RIFF_MAGIC = b"RIFF"


def _print_error(error: BaseException) -> None:
    print(f"error: {error}", file=sys.stderr)


def read_audio(path: str) -> tuple[bytes, int]:
    """Return ``(pcm, sample_rate)`` for a 16-bit mono WAV or a headerless file.

    A file without a RIFF header is taken as raw LINEAR16 at the configured
    ``speech.sample_rate_hertz``.
    """
    with open(path, "rb") as fh:
        is_wav = fh.read(len(RIFF_MAGIC)) == RIFF_MAGIC
    if not is_wav:
        with open(path, "rb") as fh:
            return fh.read(), settings.speech.sample_rate_hertz

    with wave.open(path, "rb") as wav:
        if wav.getsampwidth() != 2 or wav.getnchannels() != 1:
            raise wave.Error("only 16-bit mono PCM WAV files are supported")
        return wav.readframes(wav.getnframes()), wav.getframerate()


async def transcribe(path: str, chunk_ms: int) -> int:
    audio, sample_rate = read_audio(path)
    service = SpeechRecognitionService.shared()
    failures: list[BaseException] = []

    def on_response(response, error) -> None:
        if error is not None:
            failures.append(error)
            _print_error(error)
            return
        for result in response.results:
            if not result.alternatives:
                continue
            label = "final" if result.is_final else "interim"
            print(f"[{label}] {result.alternatives[0].transcript}")

    service.sample_rate = sample_rate
    # 2 bytes per LINEAR16 sample
    chunk_size = max(2, sample_rate * chunk_ms // 1000 * 2)
    try:
        for offset in range(0, len(audio), chunk_size):
            await service.stream_audio_data(audio[offset:offset + chunk_size], on_response)
            # pace the upload like a live microphone
            await asyncio.sleep(chunk_ms / 1000)
        await service.stop_streaming()
        await service.wait_until_finished()
    finally:
        await service.close()
    return 1 if failures else 0


async def translate(command: str, args: argparse.Namespace) -> int:
    service = TextToTranslationService.shared()
    try:
        if command == "translate":
            response = await service.text_to_translation(
                args.text,
                _print_error_only,
                source_language_code=args.source,
                target_language_code=args.target,
                request_id=args.request_id,
            )
            if response is not None:
                for item in response.translations:
                    print(item.translated_text)
        elif command == "detect":
            response = await service.detect_language(args.text, _print_error_only, request_id=args.request_id)
            if response is not None:
                for lang in response.languages:
                    print(f"{lang.language_code}\t{lang.confidence:.3f}")
        elif command == "languages":
            response = await service.get_language_codes(
                _print_error_only, display_language_code=args.display, request_id=args.request_id
            )
            if response is not None:
                for lang in response.languages:
                    print(f"{lang.language_code}\t{lang.display_name}")
        else:
            response = await service.get_list_of_glossary(_print_error_only, request_id=args.request_id)
            if response is not None:
                for glossary in response.glossaries:
                    print(f"{glossary.name}\t{glossary.entry_count}")
    finally:
        await service.close()
    return 0 if response is not None else 1


def _print_error_only(response, error) -> None:
    if error is not None:
        _print_error(error)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cloud-voice", description=settings.PROJECT_NAME)
    parser.add_argument("--token", help="OAuth access token (defaults to ACCESS_TOKEN)")
    parser.add_argument("--request-id", help="x-request-id sent with translation calls")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("transcribe", help="stream a 16-bit mono WAV or raw LINEAR16 file to Speech-to-Text")
    p.add_argument("path")
    p.add_argument("--chunk-ms", type=int, default=100)

    p = sub.add_parser("translate", help="translate text")
    p.add_argument("text")
    p.add_argument("--source")
    p.add_argument("--target")

    p = sub.add_parser("detect", help="detect the language of text")
    p.add_argument("text")

    p = sub.add_parser("languages", help="list supported languages")
    p.add_argument("--display", help="language code for display names")

    sub.add_parser("glossaries", help="list glossaries")
    return parser


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.token:
        TokenService.shared().set_token(args.token)

    logger.info("cli_command", command=args.command)
    try:
        if args.command == "transcribe":
            return await transcribe(args.path, args.chunk_ms)
        return await translate(args.command, args)
    except BusinessException as exc:
        _print_error(exc)
        return 2
    except (wave.Error, OSError) as exc:
        _print_error(exc)
        return 2


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("cli_interrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli()
