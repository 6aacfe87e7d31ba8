"""Error presentation utilities.

Centralized formatting and exit code mapping for release failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relkit.core.errors import ErrorCode
from relkit.output.console import Style
from relkit.release.errors import (
    ConfigInvalid,
    DescriptorFieldMissing,
    DescriptorMissing,
    DescriptorUnreadable,
    DescriptorWriteFailed,
    DirtyWorkingTree,
    InvalidReleaseVersion,
    InvalidVersionFormat,
    MissingTargetVersion,
    PublishFailed,
    ReleaseError,
    SecretMappingIncomplete,
    SecretUnreadable,
    UnknownReleaseStep,
    VaultSignedOut,
    VaultToolMissing,
    VcsCommandFailed,
    VersionUnchanged,
)

if TYPE_CHECKING:
    from relkit.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]

_MAX_LISTED_ENTRIES = 10


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print the problem, then the remediation."""
    console.error(error.message)
    if isinstance(error, DirtyWorkingTree):
        for entry in error.entries[:_MAX_LISTED_ENTRIES]:
            console.print(f"  {entry}", Style.DIM)
        if len(error.entries) > _MAX_LISTED_ENTRIES:
            console.print(f"  ... {len(error.entries) - _MAX_LISTED_ENTRIES} more", Style.DIM)
    for line in error.hint.splitlines():
        console.print(f"hint: {line}" if line else "", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get the process exit code for a release error."""
    match error:
        case InvalidVersionFormat() | InvalidReleaseVersion() | MissingTargetVersion():
            return int(ErrorCode.USER_ERROR)
        case VersionUnchanged() | UnknownReleaseStep():
            return int(ErrorCode.USER_ERROR)
        case DescriptorMissing() | DescriptorFieldMissing() | DescriptorUnreadable():
            return int(ErrorCode.ENV_ERROR)
        case ConfigInvalid():
            return int(ErrorCode.ENV_ERROR)
        case VaultToolMissing() | VaultSignedOut() | SecretMappingIncomplete() | SecretUnreadable():
            return int(ErrorCode.ENV_ERROR)
        case DirtyWorkingTree() | VcsCommandFailed():
            return int(ErrorCode.VCS_ERROR)
        case PublishFailed():
            return int(ErrorCode.PUBLISH_ERROR)
        case DescriptorWriteFailed():
            return int(ErrorCode.IO_ERROR)
