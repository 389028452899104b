"""Checks that must pass before any deployment step runs."""

import logging
import subprocess
from typing import Callable

import git

from .config import Config, validate_configuration
from .errors import ConfigurationError, DependencyError, PrivilegeError
from .platform import (
    command_exists, detect_package_manager, get_git_executable, get_install_commands, is_root
)


def check_privileges() -> None:
    """
    Require effective uid 0.

    Raises:
        PrivilegeError: when running as any other user
    """
    if not is_root():
        raise PrivilegeError("Error: Please run as root or using sudo.")


def ensure_git_installed(runner: Callable[..., subprocess.CompletedProcess] = subprocess.run) -> bool:
    """
    Make sure the git executable is available, installing it if it is missing.

    Args:
        runner: Function used to run package manager commands, replaceable in tests

    Returns:
        True if git had to be installed, False if it was already present

    Raises:
        DependencyError: if no supported package manager exists or the install fails
    """
    logger = logging.getLogger('sitedeploy.preflight')

    if command_exists(get_git_executable()):
        logger.debug("Git is installed")
        return False

    logger.info("Git is not installed. Installing Git...")

    package_manager = detect_package_manager()
    if package_manager is None:
        raise DependencyError("Unsupported OS or package manager not found. Please install Git manually.")

    for command in get_install_commands(package_manager):
        logger.debug(f"Running: {' '.join(command)}")
        try:
            runner(command, check=True)
        except (subprocess.CalledProcessError, OSError) as e:
            raise DependencyError(f"Error: Installing Git with {package_manager} failed: {e}") from e

    # GitPython resolved its executable at import time, before git existed.
    git.refresh()
    logger.info(f"Git installed with {package_manager}")
    return True


def run_preflight(config: Config) -> None:
    """
    Run every preflight check in order: privileges, configuration, git.

    Raises:
        PrivilegeError, ConfigurationError, DependencyError
    """
    logger = logging.getLogger('sitedeploy.preflight')

    check_privileges()

    problems = validate_configuration(config)
    for problem in problems:
        if problem.startswith("WARNING"):
            logger.warning(problem)
    fatal = [p for p in problems if p.startswith("ERROR")]
    if fatal:
        raise ConfigurationError("; ".join(fatal))

    ensure_git_installed()
