from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def relkit_root() -> Path:
    return Path(__file__).resolve().parents[2]


def iter_source_files() -> list[tuple[Path, ast.AST]]:
    """Every non-test module under relkit/, parsed."""
    root = relkit_root()
    files: list[tuple[Path, ast.AST]] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        files.append((rel, tree))
    return files


def parse_imports(tree: ast.AST) -> list[ImportRef]:
    imports: list[ImportRef] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(ImportRef(module=alias.name, line=node.lineno))
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            imports.append(ImportRef(module=node.module, line=node.lineno))
    return imports


def matches_prefix(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")


def test_subprocess_is_confined_to_platform_process() -> None:
    offenders: list[str] = []
    for rel, tree in iter_source_files():
        if rel.as_posix() == "platform/process.py":
            continue
        for item in parse_imports(tree):
            if matches_prefix(item.module, "subprocess"):
                offenders.append(f"{rel}:{item.line}: imports '{item.module}'")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)


def test_rich_is_confined_to_console() -> None:
    offenders: list[str] = []
    for rel, tree in iter_source_files():
        if rel.as_posix() == "output/console.py":
            continue
        for item in parse_imports(tree):
            if matches_prefix(item.module, "rich"):
                offenders.append(f"{rel}:{item.line}: direct rich import '{item.module}'")

    assert not offenders, "Direct rich usage policy violations:\n" + "\n".join(offenders)


def test_lower_layers_do_not_depend_on_cli() -> None:
    forbidden = ("relkit.cli", "typer")
    offenders: list[str] = []
    for rel, tree in iter_source_files():
        if rel.parts[0] == "cli":
            continue
        for item in parse_imports(tree):
            if any(matches_prefix(item.module, prefix) for prefix in forbidden):
                offenders.append(f"{rel}:{item.line}: imports '{item.module}'")

    assert not offenders, "Layering violations:\n" + "\n".join(offenders)
