from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from relkit.core.config import ReleaseConfig
from relkit.output.console import ConsoleProtocol


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Everything a release run may read from its surroundings.

    Components get the root and environment from here instead of consulting
    the process cwd or `os.environ`.
    """

    root: Path
    env: Mapping[str, str]
    config: ReleaseConfig
    console: ConsoleProtocol

    @property
    def home(self) -> str:
        return self.env.get("HOME") or self.env.get("USERPROFILE") or str(Path.home())

    @property
    def descriptor_path(self) -> Path:
        return self.root / self.config.descriptor.path

    @property
    def pom_path(self) -> Path:
        return self.root / self.config.descriptor.pom_path
