"""Service configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


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


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class ServerConfig(BaseModel):
    """HTTP surface settings."""

    host: str = Field("0.0.0.0", min_length=1, description="Bind address")
    port: int = Field(8080, ge=1, le=65535, description="Bind port")
    route_path: str = Field("/api/notify", description="Path serving the notify function")
    internal_header: str = Field(
        "X-Twikoo-Internal",
        min_length=1,
        description="Header a trusted co-located caller sets to 'true'",
    )

    @field_validator("route_path")
    @classmethod
    def validate_route_path(cls, v: str) -> str:
        """Route path must be absolute."""
        v = v.strip()
        if not v.startswith("/"):
            raise ValueError("route_path must start with '/'")
        return v

    @field_validator("internal_header")
    @classmethod
    def strip_header(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("internal_header cannot be empty")
        return stripped


class AdvancedConfig(BaseModel):
    """Outbound call settings."""

    http_request_timeout: int = Field(
        10, ge=1, le=120, description="Timeout for outbound HTTP calls (seconds)"
    )
    smtp_timeout: int = Field(
        15, ge=1, le=120, description="Timeout for SMTP connections (seconds)"
    )
    user_agent: str = Field(
        "CommentNotify/1.0",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )
    qq_avatar_endpoint: str = Field(
        "https://aq.qq.com/cn2/get_img/get_face",
        description="Public QQ avatar lookup endpoint",
    )
    akismet_endpoint: str = Field(
        "rest.akismet.com",
        description="Akismet REST host (key-prefixed for comment checks)",
    )
    qcloud_region: str = Field("ap-shanghai", description="Tencent Cloud TMS region")
    qcloud_endpoint: str = Field(
        "tms.tencentcloudapi.com", description="Tencent Cloud TMS endpoint"
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        """Strip whitespace from user agent."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class ServiceConfig(BaseModel):
    """Root configuration object for the notification service.

    Every section has defaults, so an empty file (or no file) is valid.
    """

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    server: ServerConfig = Field(default_factory=ServerConfig, description="HTTP settings")
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Outbound call settings"
    )

    model_config = {"extra": "forbid"}
