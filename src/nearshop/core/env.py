"""
Environment and path helpers.

The maps API key normally lives in a repo-local `.env`, and the CLI takes
file arguments (`--shops`, `NEARSHOP_CONFIG_PATH`) that may be relative. Both
need to work no matter which directory the process was started from.

Lookup order for the project root:
1. `NEARSHOP_PROJECT_ROOT`
2. the directory holding `NEARSHOP_ENV_FILE`
3. the nearest ancestor of the working directory with a root marker
4. the nearest ancestor of the installed package with a root marker
5. the working directory
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT_VAR = "NEARSHOP_PROJECT_ROOT"
ENV_FILE_VAR = "NEARSHOP_ENV_FILE"

_ROOT_FILE_MARKERS = (".env", ".git")


def _is_project_root(path: Path) -> bool:
    if any((path / marker).exists() for marker in _ROOT_FILE_MARKERS):
        return True
    # An installed checkout: packaging file next to the src/ tree.
    return (path / "pyproject.toml").is_file() and (path / "src" / "nearshop").is_dir()


def find_project_root(start: Path) -> Path | None:
    """Walk from `start` up to the filesystem root; None if no marker is found."""
    start = start.resolve()
    for candidate in (start, *start.parents):
        if _is_project_root(candidate):
            return candidate
    return None


def _explicit_env_file() -> Path | None:
    value = os.getenv(ENV_FILE_VAR)
    return Path(value).expanduser().resolve() if value else None


@lru_cache
def get_project_root() -> Path:
    """Return the project root directory (cached, see module docstring)."""
    override = os.getenv(PROJECT_ROOT_VAR)
    if override:
        return Path(override).expanduser().resolve()

    env_file = _explicit_env_file()
    if env_file is not None:
        return env_file.parent

    return (
        find_project_root(Path.cwd())
        or find_project_root(Path(__file__).parent)
        or Path.cwd().resolve()
    )


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the `.env` file once; returns its path, or None when there is none.

    Values already present in the process environment are never replaced.
    """
    env_path = _explicit_env_file() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a user-supplied path.

    Absolute paths and paths that exist relative to the working directory are
    used as given; anything else is taken relative to the project root.
    """
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    if p.exists():
        return p.resolve()
    return (get_project_root() / p).resolve()
