from __future__ import annotations

import re
from dataclasses import dataclass, replace

from relkit.core.result import Err, Ok, Result
from relkit.release.errors import InvalidReleaseVersion, InvalidVersionFormat
from relkit.release.model import BumpKind


# Numeric parts carry no leading zeros, so formatting a parsed version
# reproduces its text exactly. Pre-release ordinals start at 1.
_NUM = r"(0|[1-9]\d*)"
_VERSION_RE = re.compile(rf"{_NUM}\.{_NUM}\.{_NUM}(?:-([a-zA-Z]+)\.?([1-9]\d*)?)?", re.ASCII)
_STABLE_RE = re.compile(rf"{_NUM}\.{_NUM}\.{_NUM}", re.ASCII)

DEFAULT_PRE_LABEL = "alpha"


@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    pre_label: str | None = None
    pre_num: int | None = None

    @property
    def base(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        if self.pre_label is None:
            return self.base
        if self.pre_num is None:
            return f"{self.base}-{self.pre_label}"
        return f"{self.base}-{self.pre_label}.{self.pre_num}"

    def bump(self, kind: BumpKind) -> Version:
        """Bump the base triple; any pre-release suffix is dropped."""
        match kind:
            case "major":
                return Version(self.major + 1, 0, 0)
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def parse_version(version: str) -> Result[Version, InvalidVersionFormat]:
    m = _VERSION_RE.fullmatch(version)
    if m is None:
        return Err(InvalidVersionFormat(version))

    label = m.group(4)
    raw_num = m.group(5)
    pre_num = int(raw_num) if raw_num else None

    return Ok(
        Version(
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(m.group(3)),
            pre_label=label,
            pre_num=pre_num,
        )
    )


def next_pre_release(current: str) -> Result[str, InvalidVersionFormat]:
    """Next pre-release after `current`.

    `1.2.3-beta.5` -> `1.2.3-beta.6` (label kept); anything without a
    label+ordinal gets `-alpha.1` on its base triple: `1.2.3` -> `1.2.3-alpha.1`.
    Pure: the same input always yields the same output, so callers must re-read
    the stored version before each bump.
    """
    parsed = parse_version(current)
    if isinstance(parsed, Err):
        return parsed

    v = parsed.value
    if v.pre_label is not None and v.pre_num is not None:
        return Ok(str(replace(v, pre_num=v.pre_num + 1)))
    return Ok(str(Version(v.major, v.minor, v.patch, DEFAULT_PRE_LABEL, 1)))


def next_bump(current: str, kind: BumpKind) -> Result[str, InvalidVersionFormat]:
    parsed = parse_version(current)
    if isinstance(parsed, Err):
        return parsed
    return Ok(str(parsed.value.bump(kind)))


def validate_stable(version: str) -> Result[str, InvalidReleaseVersion]:
    """Accept only `MAJOR.MINOR.PATCH` with no suffix."""
    if _STABLE_RE.fullmatch(version) is None:
        return Err(InvalidReleaseVersion(version))
    return Ok(version)
