from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, StrictStr, field_validator, model_validator


INPUT_KEY = "userInput"


class InputMessage(BaseModel):
    text: Optional[StrictStr] = Field(default="", alias=INPUT_KEY)

    @model_validator(mode="before")
    @classmethod
    def _normalize_body(cls, data):
        # a null body decodes like an empty object
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data
        # keys match case-insensitively, the last matching key wins
        body = {}
        for key, value in data.items():
            if key.lower() == INPUT_KEY.lower():
                body[INPUT_KEY] = value
        return body

    @field_validator("text", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return "" if value is None else value


class SessionState(str, Enum):
    AWAITING_INPUT = "awaiting_input"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CLOSED = "closed"


class SessionOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class SessionSummary(BaseModel):
    phrase_length: int
    events: int
    error_count: int
    last_speed: int = 0
    outcome: Optional[SessionOutcome] = None
    mean_interval_ms: float = 0.0
    interval_std_ms: float = 0.0
