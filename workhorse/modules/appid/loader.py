"""Locate and load the app identity file."""

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..errors import ConfigError, IdentityNotFoundError
from .identity import AppIdentity

ENV_IDENTITY_PATH = "FULMEN_APP_IDENTITY_PATH"
DEFAULT_IDENTITY_PATH = Path(".fulmen") / "app.yaml"
MAX_SEARCH_DEPTH = 10


def executable_dir() -> Optional[Path]:
    """Directory of the running program (the console script or __main__)."""
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        return None
    return Path(argv0).resolve().parent


def search_up(start_dir: Path, max_depth: int = MAX_SEARCH_DEPTH) -> Tuple[Optional[Path], List[str]]:
    """Walk up from start_dir looking for .fulmen/app.yaml.

    Returns:
        The path found (or None) and every candidate that was checked
    """
    searched: List[str] = []
    current = start_dir
    for _ in range(max_depth):
        candidate = current / DEFAULT_IDENTITY_PATH
        searched.append(str(candidate))
        if candidate.is_file():
            return candidate, searched
        if current.parent == current:
            break
        current = current.parent
    return None, searched


class IdentityLoader:
    """Finds the identity file: env override, then cwd, then the program directory."""

    def __init__(
        self,
        cwd: Optional[Path] = None,
        exe_dir: Callable[[], Optional[Path]] = executable_dir,
        environ: Optional[dict] = None
    ):
        self.cwd = cwd
        self.exe_dir = exe_dir
        self.environ = environ if environ is not None else os.environ

    def find_path(self) -> Path:
        """
        Resolve the identity file path.

        Raises:
            IdentityNotFoundError: If no identity file exists in any location
        """
        env_path = self.environ.get(ENV_IDENTITY_PATH)
        if env_path:
            path = Path(env_path).resolve()
            if path.is_file():
                return path
            raise IdentityNotFoundError([f"{path} (from {ENV_IDENTITY_PATH})"])

        cwd = (self.cwd or Path.cwd()).resolve()
        found, searched = search_up(cwd)
        if found:
            return found

        exe_dir = self.exe_dir()
        if exe_dir is not None:
            exe_dir = exe_dir.resolve()
            if exe_dir != cwd:
                found, paths = search_up(exe_dir)
                if found:
                    return found
                searched.extend(f"{p} (fallback: executable dir)" for p in paths)

        raise IdentityNotFoundError(searched, start_dir=str(cwd))

    def load(self) -> AppIdentity:
        """
        Load the app identity.

        Raises:
            IdentityNotFoundError: If no identity file could be found
            ConfigError: If the identity file is malformed
        """
        path = self.find_path()
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e
        return AppIdentity.from_yaml(content, source=str(path))
