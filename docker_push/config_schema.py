"""
Pydantic Configuration Schema for the push post-processor

Defines the canonical configuration model with:
- Type safety and validation
- Field name aliasing (template keys <-> attribute names)
- Schema documentation

Raw configuration arrives already decoded and interpolated by the pipeline;
this module only merges, defaults and validates it.

Module: config_schema
"""

from typing import Any, Dict, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .ecr import AwsAccessConfig
from .errors import DockerPushError

logger = structlog.get_logger(__name__)

DEFAULT_EXECUTABLE = "docker"


class ConfigurationError(DockerPushError, ValueError):
    """Raised when the post-processor configuration is invalid."""


class PushConfig(BaseModel):
    """
    Push Configuration

    Registry login and push settings. AWS access settings are only used when
    ecr_login is enabled and are otherwise ignored.
    """

    executable: str = Field(
        DEFAULT_EXECUTABLE, alias="docker_path", description="Path to the container engine executable"
    )
    login: bool = Field(False, description="Log in to the registry before pushing")
    login_username: str = Field("", description="Registry username")
    login_password: str = Field("", repr=False, description="Registry password")
    login_server: str = Field("", description="Registry server to log in to")
    ecr_login: bool = Field(False, description="Fetch registry credentials from AWS ECR")
    platform: str = Field("", description="Target platform passed to push (e.g., linux/amd64)")

    # AWS Configuration
    aws_access_key: str = Field("", description="AWS access key ID")
    aws_secret_key: str = Field("", repr=False, description="AWS secret access key")
    aws_token: str = Field("", repr=False, description="AWS session token")
    aws_profile: str = Field("", description="AWS shared credentials profile")

    # Pipeline-common keys (build name, user variables) pass through untouched
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator(
        "executable",
        "login_username",
        "login_password",
        "login_server",
        "platform",
        "aws_access_key",
        "aws_secret_key",
        "aws_token",
        "aws_profile",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """Treat explicit nulls from the decoding layer as unset"""
        return "" if v is None else v

    @field_validator("executable")
    @classmethod
    def default_executable(cls, v: str) -> str:
        """Fall back to the standard engine binary"""
        return v or DEFAULT_EXECUTABLE

    @model_validator(mode="after")
    def require_server_for_ecr(self) -> "PushConfig":
        if self.ecr_login and not self.login_server:
            raise ValueError("ECR login requires login server to be provided.")
        return self

    @property
    def aws_access(self) -> AwsAccessConfig:
        return AwsAccessConfig(
            access_key=self.aws_access_key,
            secret_key=self.aws_secret_key,
            token=self.aws_token,
            profile=self.aws_profile,
        )


def _field_names() -> Dict[str, str]:
    return {info.alias: name for name, info in PushConfig.model_fields.items() if info.alias}


def merge_raws(*raws: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge raw configuration mappings; later mappings win key by key.

    Aliases (docker_path) and attribute names (executable) count as the same
    key, so whichever spelling comes last wins.
    """
    field_names = _field_names()
    merged: Dict[str, Any] = {}
    for raw in raws:
        if raw is None:
            continue
        if not isinstance(raw, Mapping):
            raise ConfigurationError(
                f"Invalid configuration block of type {type(raw).__name__}",
                "Configuration must be a mapping of option names to values",
            )
        for key, value in raw.items():
            merged[field_names.get(key, key)] = value
    return merged


def load_config(*raws: Mapping[str, Any]) -> PushConfig:
    """
    Build a validated PushConfig from one or more raw mappings

    Args:
        raws: Decoded configuration blocks, merged in order

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the merged configuration is invalid
    """
    data = merge_raws(*raws)
    try:
        config = PushConfig.model_validate(data)
    except ValidationError as e:
        messages = [error["msg"].removeprefix("Value error, ") for error in e.errors()]
        raise ConfigurationError(
            "; ".join(messages),
            details=str(e),
        ) from e

    logger.debug(
        "Configuration loaded",
        executable=config.executable,
        login=config.login,
        ecr_login=config.ecr_login,
        login_server=config.login_server,
        has_login_password=bool(config.login_password),
        platform=config.platform,
    )
    return config


def config_spec() -> Dict[str, Any]:
    """Return the JSON schema describing the accepted configuration keys"""
    return PushConfig.model_json_schema(by_alias=True)
