"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EVENT_ALL = "all"
VALID_EVENTS = (EVENT_ALL, "started", "completed", "finalized")


class Protocol(str, Enum):
    """Wire protocols an endpoint can be reached over."""

    HTTP = "HTTP"
    TCP = "TCP"
    UDP = "UDP"


class Format(str, Enum):
    """Payload encodings an endpoint can receive."""

    JSON = "JSON"
    XML = "XML"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class EndpointConfig(BaseModel):
    """A single notification target.

    The URL is a template; ``${VAR}`` references are expanded against the
    build environment on every notification attempt. ``loglines`` selects the
    console excerpt: 0 or None for none, -1 for the full log, N for the last N
    lines.
    """

    url: str = Field(..., min_length=1, description="Destination address template")
    protocol: Protocol = Field(Protocol.HTTP, description="HTTP, TCP or UDP")
    format: Format = Field(Format.JSON, description="JSON or XML payload")
    event: Optional[str] = Field(
        EVENT_ALL, description="Phase to notify on (started, completed, finalized) or 'all'"
    )
    is_json: bool = Field(
        False, alias="json", description="Send the payload with a JSON content type"
    )
    timeout: int = Field(30, gt=0, le=600, description="Send timeout in seconds")
    loglines: Optional[int] = Field(0, ge=-1, description="Console lines to include")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("protocol", "format", mode="before")
    @classmethod
    def upper_case_tags(cls, v):
        """Accept protocol and format tags in any case."""
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("url cannot be empty or whitespace-only")
        return stripped

    @field_validator("event")
    @classmethod
    def validate_event(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the event filter to lower case and reject unknown phases."""
        if v is None:
            return None
        normalized = v.strip().lower()
        if normalized not in VALID_EVENTS:
            raise ValueError(
                f"Unknown event '{v}'. Must be one of: {', '.join(VALID_EVENTS)}"
            )
        return normalized

    def __str__(self) -> str:
        return f"{self.protocol.value}:{self.url}"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """Advanced runtime settings."""

    max_workers: int = Field(
        1, ge=1, le=32, description="Endpoints notified concurrently (1 = sequential)"
    )
    user_agent: str = Field(
        "BuildNotifier/1.0",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class NotifierConfig(BaseModel):
    """Root configuration: global settings plus each job's endpoint registry."""

    root_url: Optional[str] = Field(
        None,
        description="Host root URL, prefixed verbatim to build URLs to form fullUrl",
    )
    jobs: Dict[str, List[EndpointConfig]] = Field(
        default_factory=dict, description="Endpoints keyed by job full name or name"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Advanced runtime settings"
    )

    @model_validator(mode="after")
    def validate_job_names(self):
        for job_name in self.jobs:
            if not job_name.strip():
                raise ValueError("Job names in 'jobs' cannot be empty")
        return self

    def get_endpoints(self, *names: str) -> Optional[List[EndpointConfig]]:
        """First endpoint list registered under any of ``names``, in order."""
        for name in names:
            if name in self.jobs:
                return self.jobs[name]
        return None
