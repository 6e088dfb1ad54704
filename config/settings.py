from functools import lru_cache
from typing import Literal, Optional
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()


class EngineSettings(BaseSettings):
    max_text_chars: int = 4000
    min_text_words: int = 0  # 0 disables the minimum word check
    survey_mode: Literal["round_robin", "keyed"] = "round_robin"
    lexicon_path: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix='ENGINE_')


class InferenceSettings(BaseSettings):
    api_token: Optional[str] = None
    model_id: str = "Minej/bert-base-personality"
    base_url: str = "https://router.huggingface.co/models"
    fallback_url: Optional[str] = "https://api-inference.huggingface.co/models"
    timeout_seconds: float = 30.0
    retry_after_seconds: int = 20

    model_config = SettingsConfigDict(env_prefix='HF_', protected_namespaces=())

    @property
    def enabled(self) -> bool:
        return bool(self.api_token)


class AuthSettings(BaseSettings):
    url: str = "http://localhost:54321"
    anon_key: str = ""
    timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_prefix='SUPABASE_')


class DatabaseSettings(BaseSettings):
    url: str = "sqlite:///./predictions.db"
    echo: bool = False

    model_config = SettingsConfigDict(env_prefix='DATABASE_')


class AppSettings(BaseSettings):
    log_level: str = "INFO"
    cors_origins: str = "*"  # Comma separated

    model_config = SettingsConfigDict(env_prefix='')


@lru_cache(maxsize=None)
def get_engine_settings() -> EngineSettings:
    return EngineSettings()


@lru_cache(maxsize=None)
def get_inference_settings() -> InferenceSettings:
    return InferenceSettings()


@lru_cache(maxsize=None)
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


@lru_cache(maxsize=None)
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings()


@lru_cache(maxsize=None)
def get_app_settings() -> AppSettings:
    return AppSettings()
