import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator


DEFAULT_FRONTEND_ORIGIN = "http://127.0.0.1:8080"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class Settings(BaseModel):
    frontend_origin: str = DEFAULT_FRONTEND_ORIGIN
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    phrase: Optional[str] = None
    idle_timeout: Optional[float] = Field(default=None, gt=0)
    use_gemini: bool = False
    google_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    log_level: str = "INFO"

    @field_validator("phrase", "google_api_key", "idle_timeout", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ

    values = {
        "frontend_origin": env.get("TYPESPEED_FRONTEND_ORIGIN"),
        "host": env.get("TYPESPEED_HOST"),
        "port": env.get("TYPESPEED_PORT"),
        "phrase": env.get("TYPESPEED_PHRASE"),
        "idle_timeout": env.get("TYPESPEED_IDLE_TIMEOUT"),
        "use_gemini": env.get("TYPESPEED_USE_GEMINI"),
        "google_api_key": env.get("GOOGLE_API_KEY"),
        "gemini_model": env.get("GEMINI_MODEL"),
        "log_level": env.get("TYPESPEED_LOG_LEVEL"),
    }
    # unset variables fall back to the model defaults
    return Settings(**{key: value for key, value in values.items() if value is not None})
