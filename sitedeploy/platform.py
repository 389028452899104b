"""Host platform helpers for sitedeploy."""

import os
import shutil
from pathlib import Path
from typing import Optional, Union


# Package managers that can install git, in order of preference.
# Each entry lists the commands to run, in sequence.
PACKAGE_MANAGERS = (
    ("apt", (["apt", "update"], ["apt", "install", "-y", "git"])),
    ("yum", (["yum", "install", "-y", "git"],)),
)


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Normalize a path for the current platform.

    Args:
        path: Path to normalize

    Returns:
        Normalized Path object
    """
    if isinstance(path, str):
        path = Path(path)

    # Expand user home directory (~) first, then resolve to absolute path
    return path.expanduser().resolve()


def is_root() -> bool:
    """Check whether the process runs with effective uid 0."""
    return os.geteuid() == 0


def command_exists(name: str) -> bool:
    """Check whether an executable is available on PATH."""
    return shutil.which(name) is not None


def get_git_executable() -> str:
    """
    Get the Git executable name.

    Returns:
        Git executable name
    """
    return "git"


def detect_package_manager() -> Optional[str]:
    """
    Find the first supported package manager installed on this host.

    Returns:
        Package manager name, or None if none of the known ones is present
    """
    for name, _ in PACKAGE_MANAGERS:
        if command_exists(name):
            return name
    return None


def get_install_commands(package_manager: str) -> tuple:
    """Return the command sequence that installs git with the given package manager."""
    for name, commands in PACKAGE_MANAGERS:
        if name == package_manager:
            return commands
    raise KeyError(package_manager)
