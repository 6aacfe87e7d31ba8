"""Build descriptor access.

The descriptor (`plugin/build.gradle.kts` by default) is the single source of
truth for the release version. It is treated as a tiny key-value store: three
declarations located by the patterns below, read fresh from disk on every call
and written back whole.

All pattern text lives in this module so a format change is a one-place fix.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.files import atomic_write_text
from relkit.release.errors import (
    DescriptorFieldMissing,
    DescriptorMissing,
    DescriptorUnreadable,
    DescriptorWriteFailed,
    ReleaseError,
)
from relkit.release.model import BuildMetadata


@dataclass(frozen=True, slots=True)
class DescriptorField:
    name: str
    regex: re.Pattern[str]
    expected: str  # shown to the user when the field cannot be found


# Each regex captures (prefix, value). Only the value is ever rewritten, so
# indentation, spacing and line endings survive a version write untouched.
GROUP_FIELD = DescriptorField(
    name="group",
    regex=re.compile(r'^(group[ \t]*=[ \t]*)"([^"\r\n]+)"(?=[ \t]*\r?$)', re.MULTILINE),
    expected='a line like: group = "reverse.dns.id"',
)

VERSION_FIELD = DescriptorField(
    name="version",
    regex=re.compile(r'^(version[ \t]*=[ \t]*)"([^"\r\n]+)"(?=[ \t]*\r?$)', re.MULTILINE),
    expected='a line like: version = "x.y.z"',
)

PLUGIN_ID_FIELD = DescriptorField(
    name="plugin id",
    regex=re.compile(r'(create\("[^"]*"\)\s*\{[^{}]*?\bid\s*=\s*)"([^"\r\n]+)"', re.DOTALL),
    expected='id = "plugin.id" inside gradlePlugin { plugins { create("...") { ... } } }',
)

_POM_ARTIFACT_ID_RE = re.compile(r"<artifactId>([^<]+)</artifactId>")


class BuildDescriptorStore:
    """Reads and writes version metadata in the build descriptor.

    Holds no cached state: every read goes to disk, so metadata taken after a
    version write always reflects the new version.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def ensure_exists(self) -> Result[None, ReleaseError]:
        if not self.path.is_file():
            return Err(DescriptorMissing(self.path))
        return Ok(None)

    def read_metadata(self) -> Result[BuildMetadata, ReleaseError]:
        """Extract (group, version, plugin id); each missing field is named."""
        text = self._read_text()
        if isinstance(text, Err):
            return text

        values: dict[str, str] = {}
        for f in (GROUP_FIELD, VERSION_FIELD, PLUGIN_ID_FIELD):
            m = f.regex.search(text.value)
            if m is None:
                return Err(DescriptorFieldMissing(field=f.name, pattern=f.expected, path=self.path))
            values[f.name] = m.group(2).strip()

        return Ok(
            BuildMetadata(
                group_id=values[GROUP_FIELD.name],
                version=values[VERSION_FIELD.name],
                plugin_id=values[PLUGIN_ID_FIELD.name],
            )
        )

    def read_version(self) -> Result[str, ReleaseError]:
        text = self._read_text()
        if isinstance(text, Err):
            return text
        m = VERSION_FIELD.regex.search(text.value)
        if m is None:
            return Err(
                DescriptorFieldMissing(
                    field=VERSION_FIELD.name, pattern=VERSION_FIELD.expected, path=self.path
                )
            )
        return Ok(m.group(2).strip())

    def write_version(self, new_version: str) -> Result[None, ReleaseError]:
        """Replace the version declaration, then read it back to confirm.

        A substitution that leaves the file unchanged is an error, not a no-op:
        publishing after a silent miss would ship the old version.
        """
        if not new_version or any(c in new_version for c in '"\r\n'):
            return Err(DescriptorWriteFailed(self.path, f"refusing to write version {new_version!r}"))

        text = self._read_text()
        if isinstance(text, Err):
            return text

        content = text.value
        updated = VERSION_FIELD.regex.sub(
            lambda m: f'{m.group(1)}"{new_version}"',
            content,
            count=1,
        )
        if updated == content:
            return Err(
                DescriptorWriteFailed(
                    self.path,
                    f"unable to replace version declaration with {new_version}",
                )
            )

        try:
            atomic_write_text(self.path, updated)
        except OSError as e:
            return Err(DescriptorWriteFailed(self.path, f"failed to write {self.path.name}: {e}"))

        written = self.read_version()
        if isinstance(written, Err):
            return written
        if written.value != new_version:
            return Err(
                DescriptorWriteFailed(
                    self.path,
                    f"read back {written.value} after writing {new_version}",
                )
            )
        return Ok(None)

    def _read_text(self) -> Result[str, ReleaseError]:
        try:
            # newline="" keeps CRLF descriptors byte-identical on rewrite
            with self.path.open("r", encoding="utf-8", newline="") as handle:
                return Ok(handle.read())
        except FileNotFoundError:
            return Err(DescriptorMissing(self.path))
        except (OSError, UnicodeDecodeError) as e:
            return Err(DescriptorUnreadable(self.path, str(e)))


def read_artifact_id(pom_path: Path, *, default: str) -> str:
    """artifactId from the generated POM, or `default` if not built yet."""
    try:
        text = pom_path.read_text(encoding="utf-8")
    except OSError:
        return default
    m = _POM_ARTIFACT_ID_RE.search(text)
    if m is None:
        return default
    return m.group(1).strip() or default
