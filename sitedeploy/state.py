"""Deployment state of the target directory."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class DeploymentState(Enum):
    """Enumeration of possible target directory states."""
    ABSENT = "absent"              # No directory, or a directory without .git
    INITIALIZED = "initialized"    # Directory is a Git working tree


@dataclass
class TargetInfo:
    """What is on disk in the target directory right now."""
    state: DeploymentState
    target_exists: bool
    head_commit: Optional[str]
    sparse_patterns: Tuple[str, ...]


def detect_deployment_state(target_dir: Path) -> DeploymentState:
    """
    Detect whether the target directory is already a Git working tree.

    Args:
        target_dir: Deployment target directory

    Returns:
        INITIALIZED if ``target_dir/.git`` is a directory, ABSENT otherwise
    """
    logger = logging.getLogger('sitedeploy.state')

    if (Path(target_dir) / ".git").is_dir():
        logger.debug(f"Deployment state: INITIALIZED ({target_dir})")
        return DeploymentState.INITIALIZED

    logger.debug(f"Deployment state: ABSENT ({target_dir})")
    return DeploymentState.ABSENT


def read_sparse_patterns(sparse_checkout_file: Path) -> Tuple[str, ...]:
    """Non-empty, non-comment lines of a sparse-checkout file; empty if it does not exist."""
    try:
        lines = Path(sparse_checkout_file).read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return ()
    return tuple(line.strip() for line in lines if line.strip() and not line.startswith("#"))
