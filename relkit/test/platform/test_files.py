from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from relkit.platform.files import atomic_write_text


def test_atomic_write_text_creates_file(tmp_path: Path) -> None:
    path = tmp_path / "build.gradle.kts"
    atomic_write_text(path, 'version = "1.0.0"\n')

    assert path.read_text(encoding="utf-8") == 'version = "1.0.0"\n'


def test_atomic_write_text_replaces_existing_content(tmp_path: Path) -> None:
    path = tmp_path / "build.gradle.kts"
    path.write_text("old", encoding="utf-8")

    atomic_write_text(path, "new", encoding="utf-8")

    assert path.read_text(encoding="utf-8") == "new"


def test_atomic_write_text_keeps_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "build.gradle.kts"

    atomic_write_text(path, 'group = "a.b"\r\nversion = "1.0.0"\r\n')

    assert path.read_bytes() == b'group = "a.b"\r\nversion = "1.0.0"\r\n'


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_atomic_write_text_preserves_mode(tmp_path: Path) -> None:
    path = tmp_path / "build.gradle.kts"
    path.write_text("old", encoding="utf-8")
    path.chmod(0o640)

    atomic_write_text(path, "new")

    assert stat.S_IMODE(path.stat().st_mode) == 0o640


def test_atomic_write_text_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    path = tmp_path / "build.gradle.kts"

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_text(path, "payload", encoding="utf-8")

    leftovers = list(path.parent.glob(f".{path.name}.*.tmp"))
    assert leftovers == []
    assert not path.exists()
