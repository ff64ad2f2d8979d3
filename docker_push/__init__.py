"""Push container images built earlier in the pipeline to their registry.

Library callers should call configure_logging() once before post_process so
that structured log events are filtered and rendered like the CLI does.
"""

from .artifact import IMPORT_BUILDER_ID, TAG_BUILDER_ID, ArtifactState, ImportArtifact
from .config_schema import ConfigurationError, PushConfig
from .driver import DockerDriver, Driver, DriverError
from .ecr import AwsAccessConfig, EcrLoginError
from .errors import DockerPushError
from .logging_config import configure_logging
from .post_processor import LoginError, PostProcessor, PostProcessResult, UnknownArtifactError

__all__ = [
    "ArtifactState",
    "AwsAccessConfig",
    "ConfigurationError",
    "DockerDriver",
    "DockerPushError",
    "Driver",
    "DriverError",
    "EcrLoginError",
    "IMPORT_BUILDER_ID",
    "ImportArtifact",
    "LoginError",
    "PostProcessResult",
    "PostProcessor",
    "PushConfig",
    "TAG_BUILDER_ID",
    "UnknownArtifactError",
    "configure_logging",
]
