from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Literal


BumpKind = Literal["major", "minor", "patch"]


class PublishDestination(StrEnum):
    LOCAL = "local"
    PORTAL = "portal"
    CENTRAL = "central"

    @property
    def label(self) -> str:
        match self:
            case PublishDestination.LOCAL:
                return "Maven local"
            case PublishDestination.PORTAL:
                return "Gradle Plugin Portal"
            case PublishDestination.CENTRAL:
                return "Maven Central"


class ReleaseState(Enum):
    """Checkpoints of a tag-and-publish run, in execution order."""

    START = "START"
    CLEAN_CHECKED = "CLEAN_CHECKED"
    DOCTOR_PASSED = "DOCTOR_PASSED"
    VERSION_COMPUTED = "VERSION_COMPUTED"
    DESCRIPTOR_UPDATED = "DESCRIPTOR_UPDATED"
    COMMITTED_AND_TAGGED = "COMMITTED_AND_TAGGED"
    PUBLISHED = "PUBLISHED"
    PUSHED = "PUSHED"
    REPORTED = "REPORTED"


@dataclass(frozen=True, slots=True)
class ReleaseWorkflowOptions:
    """Operator flags for one invocation; never mutated after parsing."""

    dry_run: bool = False
    no_push: bool = False
    skip_publish: bool = False
    version: str | None = None
    bump: BumpKind | None = None


@dataclass(frozen=True, slots=True)
class BuildMetadata:
    group_id: str
    version: str
    plugin_id: str


@dataclass(frozen=True, slots=True)
class ArtifactDetails:
    group_id: str
    artifact_id: str
    version: str
    plugin_id: str

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True, slots=True)
class SecretMapping:
    key: str
    ref: str  # op://vault/item[/section]/field
