"""Configuration loading and validation."""

import os
import tempfile
import yaml
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Any

from thumbd.domain.exceptions import ConfigurationError
from thumbd.shared.logging import get_logger

logger = get_logger(__name__)

STORAGE_BACKENDS = ("s3", "local")


@dataclass(frozen=True)
class WorkerConfig:
    """Immutable worker configuration, built once at startup."""

    # AWS credentials
    aws_key: Optional[str] = None
    aws_secret: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_endpoint: Optional[str] = None

    # Storage
    storage: str = "s3"  # 's3' or 'local'
    s3_bucket: Optional[str] = None
    s3_acl: str = "private"
    s3_storage_class: str = "STANDARD"
    local_root: Optional[Path] = None

    # Queue
    sqs_queue: Optional[str] = None
    sqs_queue_url: Optional[str] = None
    wait_time_seconds: int = 20
    visibility_timeout: Optional[int] = None

    # Processing
    tmp_dir: Path = Path(tempfile.gettempdir())
    request_timeout: int = 15
    default_quality: int = 85
    exit_on_decode_error: bool = True

    # Misc
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if self.storage not in STORAGE_BACKENDS:
            raise ConfigurationError(f"Invalid storage: {self.storage}")

        if self.storage == "s3" and not self.s3_bucket:
            raise ConfigurationError("s3_bucket is required for s3 storage (set BUCKET)")

        if self.storage == "local" and not self.local_root:
            raise ConfigurationError("local_root is required for local storage (set LOCAL_ROOT)")

        if not 0 <= self.wait_time_seconds <= 20:
            raise ConfigurationError(
                f"wait_time_seconds must be within 0..20, got: {self.wait_time_seconds}"
            )

        if self.visibility_timeout is not None and self.visibility_timeout < 0:
            raise ConfigurationError(
                f"visibility_timeout cannot be negative, got: {self.visibility_timeout}"
            )

        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got: {self.request_timeout}")

        if not 1 <= self.default_quality <= 100:
            raise ConfigurationError(
                f"default_quality must be within 1..100, got: {self.default_quality}"
            )

    @property
    def has_queue(self) -> bool:
        return bool(self.sqs_queue or self.sqs_queue_url)

    def require_queue(self) -> None:
        """Raise unless a queue name or URL is configured."""
        if not self.has_queue:
            raise ConfigurationError("sqs_queue or sqs_queue_url is required (set SQS_QUEUE)")


_FIELD_NAMES = {f.name for f in fields(WorkerConfig)}
_PATH_FIELDS = {"tmp_dir", "local_root"}
_INT_FIELDS = {"wait_time_seconds", "visibility_timeout", "request_timeout", "default_quality"}
_BOOL_FIELDS = {"exit_on_decode_error"}

# environment variable -> config field
_ENV_FIELDS = {
    "AWS_KEY": "aws_key",
    "AWS_SECRET": "aws_secret",
    "AWS_REGION": "aws_region",
    "S3_ENDPOINT": "s3_endpoint",
    "STORAGE": "storage",
    "BUCKET": "s3_bucket",
    "S3_ACL": "s3_acl",
    "S3_STORAGE_CLASS": "s3_storage_class",
    "LOCAL_ROOT": "local_root",
    "SQS_QUEUE": "sqs_queue",
    "SQS_QUEUE_URL": "sqs_queue_url",
    "SQS_WAIT_TIME": "wait_time_seconds",
    "SQS_VISIBILITY_TIMEOUT": "visibility_timeout",
    "TMP_DIR": "tmp_dir",
    "REQUEST_TIMEOUT": "request_timeout",
    "DEFAULT_QUALITY": "default_quality",
    "EXIT_ON_DECODE_ERROR": "exit_on_decode_error",
    "LOG_LEVEL": "log_level",
}


class ConfigLoader:
    """Loads and validates configuration from YAML files and environment variables."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file
        """
        self.config_path = Path(config_path) if config_path else Path("thumbd.yaml")
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> WorkerConfig:
        """
        Load configuration from file and environment.

        Environment variables take precedence over the config file, and
        overrides take precedence over both.

        Returns:
            WorkerConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path.exists():
            self._logger.info(f"Loading config from {self.config_path}")
            try:
                with open(self.config_path, 'r') as f:
                    yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(yaml_config, dict):
                raise ConfigurationError(f"Config file must contain a mapping: {self.config_path}")
            config_dict.update(yaml_config)
        else:
            self._logger.warning(f"Config file not found: {self.config_path}")

        config_dict.update(self._load_from_env())

        if overrides:
            for k, v in overrides.items():
                if v is None:
                    continue
                config_dict[k] = v

        filtered_config = {
            k: self._coerce(k, v) for k, v in config_dict.items() if k in _FIELD_NAMES
        }

        try:
            return WorkerConfig(**filtered_config)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config = {}
        for env_name, field_name in _ENV_FIELDS.items():
            value = os.getenv(env_name)
            if value:
                env_config[field_name] = value
        return env_config

    @staticmethod
    def _coerce(name: str, value: Any) -> Any:
        """Convert raw YAML/env values to the field's type."""
        if value is None:
            return None

        if name in _PATH_FIELDS:
            return Path(value)

        if name in _INT_FIELDS:
            try:
                return int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid {name} value: {value!r}") from e

        if name in _BOOL_FIELDS:
            if isinstance(value, bool):
                return value
            return str(value).lower() in ("true", "1", "yes")

        if name == "storage":
            return str(value).lower()

        return value
