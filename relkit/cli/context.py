from __future__ import annotations

import os
from pathlib import Path

import typer

from relkit.core.config import CONFIG_FILENAME, load_config, load_config_or_default
from relkit.core.result import Err
from relkit.output.console import RichConsole
from relkit.output.errors import print_release_error, release_error_exit_code
from relkit.release.context import ReleaseContext
from relkit.release.errors import ConfigInvalid

ROOT_ENV = "RELKIT_ROOT"
CONFIG_ENV = "RELKIT_CONFIG"


def build_context() -> ReleaseContext:
    """Snapshot the environment once and load `relkit.toml`.

    An explicit `--config` must exist; the default one is optional.
    """
    env = dict(os.environ)
    console = RichConsole()

    root_raw = env.get(ROOT_ENV)
    root = Path(root_raw) if root_raw else Path.cwd()

    explicit = env.get(CONFIG_ENV)
    if explicit:
        config_path = Path(explicit)
        config_result = load_config(config_path)
    else:
        config_path = root / CONFIG_FILENAME
        config_result = load_config_or_default(config_path)

    if isinstance(config_result, Err):
        error = ConfigInvalid(path=config_path, reason=config_result.error.message)
        print_release_error(error, console)
        raise typer.Exit(code=release_error_exit_code(error))

    return ReleaseContext(
        root=root,
        env=env,
        config=config_result.value,
        console=console,
    )
