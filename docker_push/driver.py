"""Container engine driver.

The push workflow never talks to a registry itself; it delegates login, push,
digest lookup and logout to a Driver. DockerDriver implements that contract by
shelling out to the docker CLI (or any CLI with the same interface, such as
podman).
"""

import os
import subprocess
from typing import TYPE_CHECKING, Optional, Protocol, Sequence

import structlog

from .errors import DockerPushError

if TYPE_CHECKING:
    from .ui import Ui

logger = structlog.get_logger(__name__)

DIGEST_FORMAT = "{{index .RepoDigests 0}}"


class DriverError(DockerPushError):
    """Raised when a container engine command fails."""


class Driver(Protocol):
    def login(self, server: str, username: str, password: str) -> None: ...

    def logout(self, server: str) -> None: ...

    def push(self, name: str, platform: str) -> None: ...

    def digest(self, image_id: str) -> str: ...

    def delete_image(self, image_id: str) -> None: ...


class DockerDriver:
    """Driver backed by the docker command line.

    Args:
        executable: Engine binary name or path
        ui: Optional sink for progress messages
        config_dir: Credential configuration directory; exported to every
            command as DOCKER_CONFIG when set
    """

    def __init__(self, executable: str = "docker", ui: Optional["Ui"] = None, config_dir: str = ""):
        self.executable = executable
        self.ui = ui
        self.config_dir = config_dir

    def _env(self) -> Optional[dict[str, str]]:
        if not self.config_dir:
            return None
        env = dict(os.environ)
        env["DOCKER_CONFIG"] = self.config_dir
        return env

    def _run_command(self, args: Sequence[str], stdin: str = "") -> str:
        """Run an engine command and return stdout, raising DriverError on failure."""
        cmd = [self.executable, *args]
        logger.debug("Executing", command=" ".join(cmd), config_dir=self.config_dir or None)

        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                check=False,
                env=self._env(),
            )
        except FileNotFoundError as e:
            raise DriverError(
                f"Container engine not found: {self.executable}",
                "Install docker or set docker_path to the engine binary",
            ) from e
        except OSError as e:
            raise DriverError(f"Cannot run container engine: {self.executable}", details=str(e)) from e

        if result.returncode != 0:
            details = (result.stderr or "").strip() or (result.stdout or "").strip()
            raise DriverError(
                f"Command failed: {' '.join(cmd)}",
                details=details or f"exit status {result.returncode}",
            )
        return result.stdout

    def login(self, server: str, username: str, password: str) -> None:
        args = ["login"]
        if username:
            args.extend(["-u", username])
        if password:
            args.append("--password-stdin")
        if server:
            args.append(server)

        logger.info("Logging in", server=server or "default", username=username)
        self._run_command(args, stdin=password)

    def logout(self, server: str) -> None:
        args = ["logout"]
        if server:
            args.append(server)

        logger.info("Logging out", server=server or "default")
        self._run_command(args)

    def push(self, name: str, platform: str) -> None:
        args = ["push"]
        if platform:
            args.extend(["--platform", platform])
        args.append(name)

        logger.info("Pushing image", name=name, platform=platform or None)
        output = self._run_command(args)
        if self.ui is not None:
            for line in output.splitlines():
                if line.strip():
                    self.ui.message(line)

    def digest(self, image_id: str) -> str:
        output = self._run_command(["inspect", "--format", DIGEST_FORMAT, image_id])
        digest = output.strip()
        logger.debug("Resolved digest", image_id=image_id, digest=digest)
        return digest

    def delete_image(self, image_id: str) -> None:
        logger.info("Removing image", image_id=image_id)
        self._run_command(["rmi", image_id])
