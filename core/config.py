"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


def _with_default_port(host: str) -> str:
    host = host.strip()
    if not host:
        raise ValueError("host must not be empty")
    # IPv6 literals are written as [::1]:port
    tail = host.rsplit("]", 1)[-1]
    if ":" not in tail:
        return f"{host}:443"
    return host


class GrpcTlsSettings(BaseModel):
    enabled: bool = True
    ca: Optional[str] = None
    cert: Optional[str] = None
    key: Optional[str] = None


class GrpcChannelSettings(BaseModel):
    tls: GrpcTlsSettings = Field(default_factory=GrpcTlsSettings)
    # 0 or negative keeps the grpc library default
    max_send_message_length: int = -1
    max_receive_message_length: int = -1
    user_agent: str = "cloud-voice-clients/1.0"


class SpeechSettings(BaseModel):
    host: str = "speech.googleapis.com:443"
    sample_rate_hertz: int = 16000
    language_code: str = "en-US"
    max_alternatives: int = 30
    enable_word_time_offsets: bool = True
    single_utterance: bool = False
    interim_results: bool = True

    @field_validator("host")
    @classmethod
    def _normalize_host(cls, v: str) -> str:
        return _with_default_port(v)


class TranslationSettings(BaseModel):
    host: str = "translate.googleapis.com:443"
    project_id: str = ""
    location_id: str = "us-central1"
    glossary_id: str = ""
    mime_type: str = "text/plain"
    # Per-user defaults, overridable at runtime through TranslationPreferences
    source_language_code: str = "en-US"
    target_language_code: str = "sr-Latn"
    glossary_enabled: bool = False

    @field_validator("host")
    @classmethod
    def _normalize_host(cls, v: str) -> str:
        return _with_default_port(v)


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="Cloud Voice Clients")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")

    # API keys may be restricted to an application id; sent as x-ios-bundle-identifier
    BUNDLE_IDENTIFIER: str = Field(default="com.google.cloud.samples.speechtospeech")
    # Seed for the shared token holder; normally set at runtime by the session layer
    ACCESS_TOKEN: Optional[str] = Field(default=None)

    # 分组配置：gRPC 通道 / 语音识别 / 翻译
    grpc: GrpcChannelSettings = Field(default_factory=GrpcChannelSettings)
    speech: SpeechSettings = Field(default_factory=SpeechSettings)
    translation: TranslationSettings = Field(default_factory=TranslationSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("ACCESS_TOKEN", mode="before")
    @classmethod
    def _blank_token_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


settings = Settings()
