"""Push post-processor.

Takes an image produced by the import or tag step, optionally logs in to the
registry (directly or through an ECR credential exchange), pushes the image
under its name and every tag, and returns a new artifact carrying the pushed
name, the tags and the resolved digest.

Usage:
    processor = PostProcessor()
    processor.configure({"login": True, "login_server": "registry.example.com", ...})
    result = processor.post_process(ConsoleUi(), artifact)
"""

import os
import shutil
import tempfile
from contextlib import ExitStack
from typing import Any, Dict, Mapping, NamedTuple, Optional

import structlog

from .artifact import (
    DIGEST_KEY,
    IMPORT_BUILDER_ID,
    PUSHABLE_BUILDER_IDS,
    Artifact,
    ArtifactState,
    ImportArtifact,
)
from .config_schema import PushConfig, config_spec, load_config
from .driver import DockerDriver, Driver, DriverError
from .errors import DockerPushError
from .ui import Ui

logger = structlog.get_logger(__name__)

# Set when the credential store is managed outside this process
DOCKER_CONFIG_ENV = "DOCKER_CONFIG"

# Output artifacts carry the import producer tag so later tag/push steps accept them
BUILDER_ID = IMPORT_BUILDER_ID


class UnknownArtifactError(DockerPushError):
    """Raised when the input artifact was not produced by a pushable step."""


class LoginError(DockerPushError):
    """Raised when logging in to the registry fails."""


class PostProcessResult(NamedTuple):
    artifact: ImportArtifact
    keep: bool
    force_override: bool


class PostProcessor:
    """Pushes an imported or tagged image to its registry.

    Args:
        driver: Driver to use instead of a DockerDriver (mainly for tests).
            An injected driver never gets a temporary config directory.
    """

    def __init__(self, driver: Optional[Driver] = None):
        self.driver = driver
        self.config = PushConfig()

    def config_spec(self) -> Dict[str, Any]:
        return config_spec()

    def configure(self, *raws: Mapping[str, Any]) -> None:
        """Decode, default and validate configuration.

        Raises:
            ConfigurationError: If ecr_login is set without a login_server
        """
        self.config = load_config(*raws)

    def post_process(self, ui: Ui, artifact: Artifact) -> PostProcessResult:
        """Push the artifact's image under all of its names.

        Cleanups (logout, temporary config directory removal) run in reverse
        order of acquisition on every exit path.

        Returns:
            PostProcessResult with the pushed artifact, keep=True and
            force_override=False

        Raises:
            UnknownArtifactError: If the artifact is not from docker-import or docker-tag
            EcrLoginError: If ECR credentials cannot be fetched
            LoginError: If the registry login fails
            DriverError: If any push fails
        """
        builder_id = artifact.builder_id()
        if builder_id not in PUSHABLE_BUILDER_IDS:
            raise UnknownArtifactError(
                f"Unknown artifact type: {builder_id}",
                "Can only import from docker-import and docker-tag artifacts.",
            )

        log = logger.bind(image_id=artifact.id(), builder_id=builder_id)

        with ExitStack() as cleanup:
            driver = self._acquire_driver(ui, cleanup)
            self._login(ui, driver, cleanup)

            state = ArtifactState.from_artifact(artifact)
            names = [artifact.id(), *state.tags]

            for name in names:
                ui.message(f"Pushing: {name}")
                driver.push(name, self.config.platform)

            log.info("Pushed image", names=names, platform=self.config.platform or None)

            digest = self._resolve_digest(ui, driver, artifact.id())

            generated_data = dict(state.generated_data)
            generated_data[DIGEST_KEY] = digest
            pushed_state = ArtifactState(tags=state.tags, generated_data=generated_data)

            result = ImportArtifact(
                builder_id_value=BUILDER_ID,
                driver=driver,
                id_value=names[0],
                state_data=pushed_state.to_state_data(),
            )

        return PostProcessResult(artifact=result, keep=True, force_override=False)

    def _acquire_driver(self, ui: Ui, cleanup: ExitStack) -> Driver:
        if self.driver is not None:
            return self.driver

        config_dir = ""
        if DOCKER_CONFIG_ENV not in os.environ:
            ui.message("Creating temporary Docker configuration directory")
            try:
                config_dir = tempfile.mkdtemp(prefix="docker-push")
            except OSError as e:
                raise DockerPushError(f"Error creating temporary Docker configuration directory: {e}") from e

            logger.debug("Created temporary Docker configuration directory", path=config_dir)
            cleanup.callback(self._remove_config_dir, ui, config_dir)

        return DockerDriver(executable=self.config.executable, ui=ui, config_dir=config_dir)

    @staticmethod
    def _remove_config_dir(ui: Ui, config_dir: str) -> None:
        ui.message("Removing temporary Docker configuration directory")
        try:
            shutil.rmtree(config_dir)
        except Exception as e:
            logger.warning(
                "Failed to remove temporary Docker configuration directory", path=config_dir, error=str(e), exc_info=True
            )
            ui.error(f"Error removing temporary Docker configuration directory: {e}")

    def _login(self, ui: Ui, driver: Driver, cleanup: ExitStack) -> None:
        config = self.config
        username, password = config.login_username, config.login_password

        if config.ecr_login:
            ui.message("Fetching ECR credentials...")
            username, password = config.aws_access.ecr_get_login(config.login_server)

        if not (config.login or config.ecr_login):
            return

        ui.message("Logging in...")
        try:
            driver.login(config.login_server, username, password)
        except DriverError as e:
            raise LoginError(f"Error logging in to Docker: {e.message}", details=e.details) from e

        cleanup.callback(self._logout, ui, driver, config.login_server)

    @staticmethod
    def _logout(ui: Ui, driver: Driver, server: str) -> None:
        ui.message("Logging out...")
        try:
            driver.logout(server)
        except Exception as e:
            logger.warning("Logout failed", server=server, error=str(e), exc_info=True)
            ui.error(f"Error logging out: {e}")

    @staticmethod
    def _resolve_digest(ui: Ui, driver: Driver, image_id: str) -> str:
        try:
            return driver.digest(image_id)
        except DriverError as e:
            logger.info("Digest lookup failed", image_id=image_id, error=str(e))
            ui.message("Unable to determine digest for source image, ignoring it for now")
            return ""
