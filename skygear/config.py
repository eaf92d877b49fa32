"""
容器配置
Configuration is an immutable value; defaults come from environment
variables through Pydantic Settings.
"""
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skygear.errors import InvalidConfiguration

DEFAULT_ENDPOINT = "http://skygear.dev/"
DEFAULT_API_KEY = "changeme"
DEFAULT_REQUEST_TIMEOUT = 30_000  # ms


class SkygearSettings(BaseSettings):
    """Environment-backed defaults (``SKYGEAR_ENDPOINT`` etc.)"""

    model_config = SettingsConfigDict(
        env_prefix="SKYGEAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ENDPOINT: str = DEFAULT_ENDPOINT
    API_KEY: str = DEFAULT_API_KEY
    REQUEST_TIMEOUT: int = DEFAULT_REQUEST_TIMEOUT
    PUBSUB_HANDLER_EXECUTION_IN_BACKGROUND: bool = False
    PUBSUB_CONNECT_AUTOMATICALLY: bool = True

    # ===== 日志配置 =====
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"


@lru_cache
def get_settings() -> SkygearSettings:
    """获取配置单例"""
    return SkygearSettings()


class Configuration(BaseModel):
    """Immutable container configuration."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    api_key: str
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    pubsub_handler_execution_in_background: bool = False
    pubsub_connect_automatically: bool = True

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint 必须以 http:// 或 https:// 开头")
        # requests are resolved relative to the endpoint
        if not v.endswith("/"):
            v = v + "/"
        return v

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("api_key 不能为空")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("request_timeout 必须大于 0")
        return v

    @classmethod
    def build(cls, **kwargs) -> "Configuration":
        """Like the constructor, but raises ``InvalidConfiguration``."""
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            raise InvalidConfiguration(
                "Invalid configuration",
                details={"errors": [err["msg"] for err in exc.errors()]},
            ) from exc

    @classmethod
    def default(cls) -> "Configuration":
        settings = get_settings()
        return cls.build(
            endpoint=settings.ENDPOINT,
            api_key=settings.API_KEY,
            request_timeout=settings.REQUEST_TIMEOUT,
            pubsub_handler_execution_in_background=settings.PUBSUB_HANDLER_EXECUTION_IN_BACKGROUND,
            pubsub_connect_automatically=settings.PUBSUB_CONNECT_AUTOMATICALLY,
        )

    def replace(self, **changes) -> "Configuration":
        """Return a copy with ``changes`` applied and re-validated."""
        return self.build(**{**self.model_dump(), **changes})

    @property
    def is_using_default_api_key(self) -> bool:
        return self.api_key == DEFAULT_API_KEY
