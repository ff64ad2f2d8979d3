"""Build artifacts exchanged between pipeline steps.

An artifact is identified by the producer tag ("builder id") of the step that
created it, a primary identity (the image name) and a map of named state.
State crosses a serialization boundary between steps and arrives loosely
typed; ArtifactState.from_artifact normalizes it once on ingress.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

import structlog

if TYPE_CHECKING:
    from .driver import Driver

logger = structlog.get_logger(__name__)

# Producer tags of the steps whose artifacts can be pushed
IMPORT_BUILDER_ID = "packer.post-processor.docker-import"
TAG_BUILDER_ID = "packer.post-processor.docker-tag"
PUSHABLE_BUILDER_IDS = (IMPORT_BUILDER_ID, TAG_BUILDER_ID)

# Reserved state keys
TAGS_KEY = "docker_tags"
GENERATED_DATA_KEY = "generated_data"
DIGEST_KEY = "Digest"


class Artifact(Protocol):
    def builder_id(self) -> str: ...

    def id(self) -> str: ...

    def state(self, name: str) -> Any: ...


def normalize_tags(value: Any) -> List[str]:
    """Coerce a loosely typed tag list into a list of strings.

    Elements that are not strings are dropped rather than rejected.
    """
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return []

    tags = [tag for tag in value if isinstance(tag, str)]
    if len(tags) != len(value):
        logger.debug("Dropped non-string tags", received=len(value), kept=len(tags))
    return tags


def normalize_generated_data(value: Any) -> Dict[str, Any]:
    """Shallow-copy a generated data map with its keys converted to strings."""
    if not isinstance(value, Mapping):
        return {}
    return {str(key): item for key, item in value.items()}


@dataclass
class ArtifactState:
    """Typed view of the state this step reads from and writes to artifacts."""

    tags: List[str] = field(default_factory=list)
    generated_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_artifact(cls, artifact: Artifact) -> "ArtifactState":
        return cls(
            tags=normalize_tags(artifact.state(TAGS_KEY)),
            generated_data=normalize_generated_data(artifact.state(GENERATED_DATA_KEY)),
        )

    def to_state_data(self) -> Dict[str, Any]:
        return {
            TAGS_KEY: list(self.tags),
            GENERATED_DATA_KEY: dict(self.generated_data),
        }


@dataclass
class ImportArtifact:
    """An image available to the container engine under a given name.

    Attributes:
        builder_id_value: Producer tag of the step that created the artifact
        driver: Driver able to act on the image (used by destroy)
        id_value: Primary image name
        state_data: Named state carried to downstream steps
    """

    builder_id_value: str
    driver: Optional["Driver"]
    id_value: str
    state_data: Dict[str, Any] = field(default_factory=dict)

    def builder_id(self) -> str:
        return self.builder_id_value

    def files(self) -> List[str]:
        return []

    def id(self) -> str:
        return self.id_value

    def state(self, name: str) -> Any:
        return self.state_data.get(name)

    def destroy(self) -> None:
        if self.driver is None:
            return
        self.driver.delete_image(self.id())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "builder_id": self.builder_id_value,
            "id": self.id_value,
            "state": self.state_data,
        }

    def __str__(self) -> str:
        return f"Imported Docker image: {self.id()}"
