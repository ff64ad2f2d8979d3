"""Pytest configuration and fixtures for test isolation."""

from unittest.mock import MagicMock

import pytest

from docker_push.artifact import IMPORT_BUILDER_ID, ImportArtifact
from docker_push.driver import DockerDriver


@pytest.fixture(scope="function", autouse=True)
def isolate_environment(monkeypatch):
    """Automatically isolate each test from the host environment.

    Clears variables that change how the push workflow or boto3 behave, so
    tests run the same way in CI as they do locally.
    """
    env_vars_to_clear = [
        "DOCKER_CONFIG",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
        "AWS_PROFILE",
        "AWS_DEFAULT_REGION",
        "AWS_REGION",
        "LOG_LEVEL",
        "APP_ENV",
        "BUILD_VERSION",
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    yield


@pytest.fixture
def ui():
    """Recording UI sink."""
    return MagicMock()


@pytest.fixture
def mock_driver():
    """Driver double that succeeds for every operation."""
    driver = MagicMock(spec=DockerDriver)
    driver.digest.return_value = "myimage@sha256:abc123"
    return driver


@pytest.fixture
def make_artifact():
    """Build an input artifact with the given identity and state."""

    def _make(image_id="myimage", builder_id=IMPORT_BUILDER_ID, **state):
        return ImportArtifact(builder_id_value=builder_id, driver=None, id_value=image_id, state_data=state)

    return _make
