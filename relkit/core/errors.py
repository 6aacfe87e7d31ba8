"""Process exit codes for release commands.

Values are part of the command-line contract and must stay stable:
- 0: Success
- 1: User error (bad version input, conflicting flags)
- 2: Environment error (vault CLI missing, secrets unreadable, bad config)
- 3: VCS error (dirty working tree, git command failed)
- 4: Publish error (build tool publish task failed)
- 5: I/O error (build descriptor could not be written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for release commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    VCS_ERROR = 3
    PUBLISH_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
