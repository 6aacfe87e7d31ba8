"""Failure variants for the release workflow.

Each variant carries the data needed to explain itself: `message` says what
is wrong, `hint` says what the operator should do next.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class InvalidVersionFormat:
    version: str

    @property
    def message(self) -> str:
        return f"Invalid version format: {self.version}"

    @property
    def hint(self) -> str:
        return "Expected MAJOR.MINOR.PATCH or MAJOR.MINOR.PATCH-label.N (example: 1.2.3-alpha.1)"


@dataclass(frozen=True, slots=True)
class InvalidReleaseVersion:
    version: str

    @property
    def message(self) -> str:
        return f"Invalid release version: {self.version}"

    @property
    def hint(self) -> str:
        return "Use semantic version format without suffix: x.y.z (example: 1.2.3)"


@dataclass(frozen=True, slots=True)
class MissingTargetVersion:
    @property
    def message(self) -> str:
        return "Missing release version"

    @property
    def hint(self) -> str:
        return "Pass --version x.y.z or --bump major|minor|patch"


@dataclass(frozen=True, slots=True)
class VersionUnchanged:
    version: str

    @property
    def message(self) -> str:
        return f"Version is already {self.version}"

    @property
    def hint(self) -> str:
        return "Provide a different version, or run bump-pre for the pre-release flow"


@dataclass(frozen=True, slots=True)
class DescriptorMissing:
    path: Path

    @property
    def message(self) -> str:
        return f"Required file not found: {self.path}"

    @property
    def hint(self) -> str:
        return "Run from the repository root (--root) or set [descriptor] path in relkit.toml"


@dataclass(frozen=True, slots=True)
class DescriptorFieldMissing:
    field: str
    pattern: str
    path: Path

    @property
    def message(self) -> str:
        return f"Unable to read {self.field} from {self.path.name}"

    @property
    def hint(self) -> str:
        return f"Expected {self.pattern} in {self.path}"


@dataclass(frozen=True, slots=True)
class DescriptorUnreadable:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Cannot read {self.path.name}: {self.reason}"

    @property
    def hint(self) -> str:
        return f"Check that {self.path} is a readable UTF-8 file"


@dataclass(frozen=True, slots=True)
class DescriptorWriteFailed:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Version update failed: {self.reason}"

    @property
    def hint(self) -> str:
        return f'Check the version = "..." declaration in {self.path}'


@dataclass(frozen=True, slots=True)
class ConfigInvalid:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"Invalid config {self.path.name}: {self.reason}"

    @property
    def hint(self) -> str:
        return f"Fix or remove {self.path}"


@dataclass(frozen=True, slots=True)
class VaultToolMissing:
    tool: str

    @property
    def message(self) -> str:
        return f"1Password CLI ('{self.tool}') not found"

    @property
    def hint(self) -> str:
        return f"Install it first (brew install 1password-cli), then run: {self.tool} signin"


@dataclass(frozen=True, slots=True)
class VaultSignedOut:
    tool: str
    output: str

    @property
    def message(self) -> str:
        return "1Password session is not active"

    @property
    def hint(self) -> str:
        lines = [self.output] if self.output else []
        lines.append(f"Run: {self.tool} signin, then retry")
        return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SecretMappingIncomplete:
    destination: str
    missing: tuple[str, ...]
    invalid: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        problems: list[str] = []
        if self.missing:
            problems.append(f"missing {', '.join(self.missing)}")
        if self.invalid:
            problems.append(f"malformed reference for {', '.join(self.invalid)}")
        return f"{self.destination} secret mapping is incomplete: {'; '.join(problems)}"

    @property
    def hint(self) -> str:
        keys = "\n".join(
            f'  {key} = "op://vault/item/section/field"' for key in (*self.missing, *self.invalid)
        )
        return f"Update [secrets.{self.destination}] in relkit.toml:\n{keys}"


@dataclass(frozen=True, slots=True)
class SecretUnreadable:
    ref: str
    output: str

    @property
    def message(self) -> str:
        return f"Cannot read 1Password secret: {self.ref}"

    @property
    def hint(self) -> str:
        details = self.output or "No output from 1Password CLI."
        return f"{details}\nVerify vault/item/section/field names and access permissions."


@dataclass(frozen=True, slots=True)
class DirtyWorkingTree:
    entries: tuple[str, ...]

    @property
    def message(self) -> str:
        return f"Working tree is dirty ({len(self.entries)} changed paths)"

    @property
    def hint(self) -> str:
        return "Commit or stash changes before running release commands"


@dataclass(frozen=True, slots=True)
class VcsCommandFailed:
    command: str
    output: str

    @property
    def message(self) -> str:
        return f"{self.command} failed"

    @property
    def hint(self) -> str:
        details = self.output or "No additional output."
        return f"{details}\nInspect the repository state and finish or revert manually."


@dataclass(frozen=True, slots=True)
class PublishFailed:
    destination: str
    output: str

    @property
    def message(self) -> str:
        return f"{self.destination} publish failed"

    @property
    def hint(self) -> str:
        details = self.output or "No additional output."
        return f"{details}\nThe release commit and tag are kept; re-run the publish command once fixed."


@dataclass(frozen=True, slots=True)
class UnknownReleaseStep:
    step: str

    @property
    def message(self) -> str:
        return f"unknown release step: {self.step}"

    @property
    def hint(self) -> str:
        return "This is a relkit bug; re-run with the same flags and report the output."


ReleaseError = (
    InvalidVersionFormat
    | InvalidReleaseVersion
    | MissingTargetVersion
    | VersionUnchanged
    | DescriptorMissing
    | DescriptorFieldMissing
    | DescriptorUnreadable
    | DescriptorWriteFailed
    | ConfigInvalid
    | VaultToolMissing
    | VaultSignedOut
    | SecretMappingIncomplete
    | SecretUnreadable
    | DirtyWorkingTree
    | VcsCommandFailed
    | PublishFailed
    | UnknownReleaseStep
)
