"""Runtime settings for the queue service, read from environment and `.env`."""

from pydantic import AliasChoices, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when environment values fail settings validation at startup."""


class AppSettings(BaseSettings):
    """Application settings for API runtime, admission control and queue policy.

    Environment variable names map directly to field names in uppercase.
    Example: `cpu_threshold` reads from `CPU_THRESHOLD`. Legacy names `PORT`,
    `authToken`, `timeOut`, `SKIP_LAUNCH` and `NODE_ENV` are accepted as well.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        auth_token: Optional shared token required on submissions; blank disables auth.
        socket_timeout_seconds: Idle connection timeout passed to the web server.
        socket_timeout_milliseconds: Legacy `timeOut` value; overrides `socket_timeout_seconds` when set.
        executor_core_count: vCPU count used to normalize process CPU usage.
        cpu_threshold: Normalized CPU fraction below which the worker may start a job.
        admission_poll_interval_seconds: Wait between admission checks while CPU is busy.
        result_ttl_seconds: Retention window for uncollected results.
        result_sweep_interval_seconds: Interval between TTL sweeps.
        max_retry_attempts: Executor attempts per job before giving up.
        retry_delay_seconds: Fixed delay between executor attempts.
        snapshot_path: Location of the persisted queue snapshot file.
        executor_skip_launch: Bypass the executor readiness gate on submission.
        source_request_timeout_seconds: Request timeout of the page-source executor.
        log_level: Root logging level name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        case_sensitive=False,
    )

    environment_name: str = Field(default="development", validation_alias=AliasChoices("environment_name", "NODE_ENV"))
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=3000, ge=1, le=65535, validation_alias=AliasChoices("application_port", "PORT"))
    auth_token: str | None = Field(default=None, validation_alias=AliasChoices("auth_token", "authToken"))
    socket_timeout_seconds: float = Field(default=60.0, gt=0)
    socket_timeout_milliseconds: float | None = Field(default=None, gt=0, validation_alias=AliasChoices("timeOut"))
    executor_core_count: int = Field(default=8, ge=1)
    cpu_threshold: float = Field(default=0.85, gt=0, le=1)
    admission_poll_interval_seconds: float = Field(default=0.5, gt=0)
    result_ttl_seconds: float = Field(default=900.0, gt=0)
    result_sweep_interval_seconds: float = Field(default=60.0, gt=0)
    max_retry_attempts: int = Field(default=5, ge=1)
    retry_delay_seconds: float = Field(default=2.0, ge=0)
    snapshot_path: str = Field(default="data/queue_snapshot.json", min_length=1)
    executor_skip_launch: bool = Field(default=False, validation_alias=AliasChoices("executor_skip_launch", "SKIP_LAUNCH"))
    source_request_timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("auth_token")
    @classmethod
    def _normalize_auth_token(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None

    @field_validator("snapshot_path")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log level: {value}")
        return normalized_value

    @model_validator(mode="after")
    def _apply_legacy_socket_timeout(self) -> "AppSettings":
        if self.socket_timeout_milliseconds is not None:
            self.socket_timeout_seconds = self.socket_timeout_milliseconds / 1000.0
        return self


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
