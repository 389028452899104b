"""Sparse-checkout site deployment: first-time setup and idempotent updates."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from git import GitCommandError

from .config import Config
from .errors import CommandError
from .git_runner import GitRunner
from .identity import DeployIdentity
from .retry import retry_operation
from .state import DeploymentState, TargetInfo, detect_deployment_state, read_sparse_patterns


@dataclass
class DeployResult:
    """Result of a deployment run."""
    success: bool
    message: str
    operation: str
    state_before: DeploymentState
    attempts: int = 1
    head_commit: Optional[str] = None


class SiteDeployer:
    """
    Brings the target directory in line with the remote branch.

    Two states drive the work:

    - ABSENT: create the directory, initialize a repository with a non-cone
      sparse checkout limited to the configured patterns, fetch the branch
      and force-check it out.
    - INITIALIZED: fetch the branch and hard-reset to the remote-tracking
      ref, discarding any local changes.

    Every git command runs as the deploy identity. Only the fetch is
    retried; any other git failure raises ``CommandError`` immediately and
    leaves the directory as the last successful step produced.
    """

    def __init__(
        self,
        config: Config,
        identity: Optional[DeployIdentity] = None,
        git_factory: Callable[[Path, DeployIdentity], GitRunner] = GitRunner,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize SiteDeployer.

        Args:
            config: Deployment configuration
            identity: User git runs as; resolved from ``config.deploy_user`` if omitted
            git_factory: Builds the git runner for a working directory and identity
            sleep: Sleep function used between fetch attempts
        """
        self.config = config
        self.identity = identity or DeployIdentity.from_username(config.deploy_user)
        self.target_dir = config.target_dir
        self.logger = logging.getLogger('sitedeploy.deployer')
        self._git_factory = git_factory
        self._sleep = sleep
        self._git: Optional[GitRunner] = None

    @property
    def git(self) -> GitRunner:
        # Created lazily: the working directory may not exist before initialize()
        if self._git is None:
            self._git = self._git_factory(self.target_dir, self.identity)
        return self._git

    def detect_state(self) -> DeploymentState:
        return detect_deployment_state(self.target_dir)

    def inspect(self) -> TargetInfo:
        """Describe the target directory as it is on disk."""
        state = self.detect_state()
        head_commit = None
        if state is DeploymentState.INITIALIZED:
            head_commit = self.git.head_commit()
        return TargetInfo(
            state=state,
            target_exists=self.target_dir.is_dir(),
            head_commit=head_commit,
            sparse_patterns=read_sparse_patterns(self.config.sparse_checkout_file)
        )

    def deploy(self) -> DeployResult:
        """
        Detect the target state and run the matching transition.

        Returns:
            DeployResult describing the completed run

        Raises:
            RetryExhaustedError: if every fetch attempt failed
            CommandError: if a non-retried git command failed
        """
        state = self.detect_state()
        if state is DeploymentState.INITIALIZED:
            return self.update()
        return self.initialize()

    def initialize(self) -> DeployResult:
        """Set up a sparse checkout of the branch in an ABSENT target."""
        config = self.config

        if not self.target_dir.is_dir():
            self.logger.info(f"Creating target directory: {self.target_dir}")
            self.target_dir.mkdir(parents=True)
            self.identity.chown(self.target_dir)
            self.logger.debug(f"Target directory owned by {self.identity.name}:{self.identity.group_name}")

        self.logger.info(f"Initializing empty Git repository in {self.target_dir}")
        self._run("git init", self.git.init)

        self.logger.info(f"Adding remote repository: {config.repo_url}")
        self._run("git remote add", self.git.remote_add, config.remote_name, config.repo_url)

        patterns = ", ".join(f"'{p}'" for p in config.sparse_patterns)
        self.logger.info(f"Configuring sparse checkout to pull only {patterns} in non-cone mode")
        self._run("git config", self.git.config_set, "core.sparseCheckout", "true")
        self._run("git config", self.git.config_set, "core.sparseCheckoutCone", "false")
        self._run("git sparse-checkout init", self.git.sparse_checkout_init_no_cone)
        self._write_sparse_patterns()

        self.logger.info(f"Fetching the {config.branch} branch")
        attempts = self._fetch()

        self.logger.info(f"Checking out the {config.branch} branch")
        self._run("git checkout", self.git.checkout_force, config.branch)

        self.logger.info("Sparse checkout setup completed successfully!")
        return DeployResult(
            success=True,
            message="Sparse checkout setup completed successfully",
            operation="initialize",
            state_before=DeploymentState.ABSENT,
            attempts=attempts,
            head_commit=self.git.head_commit()
        )

    def update(self) -> DeployResult:
        """Fetch the branch and hard-reset an INITIALIZED target to it."""
        config = self.config

        self.logger.info(f"Existing git repository found in {self.target_dir}. Pulling latest changes.")
        attempts = self._fetch()
        self._run("git reset", self.git.reset_hard, config.remote_ref)

        self.logger.info("Update completed successfully!")
        return DeployResult(
            success=True,
            message="Update completed successfully",
            operation="update",
            state_before=DeploymentState.INITIALIZED,
            attempts=attempts,
            head_commit=self.git.head_commit()
        )

    def _fetch(self) -> int:
        return retry_operation(
            lambda: self.git.fetch(self.config.remote_name, self.config.branch),
            f"git fetch {self.config.remote_name} {self.config.branch}",
            self.config,
            sleep=self._sleep
        )

    def _run(self, command: str, func: Callable[..., str], *args: str) -> str:
        try:
            return func(*args)
        except GitCommandError as e:
            stderr = (e.stderr or "").strip()
            raise CommandError(
                f"Error: {command} failed with status {e.status}: {stderr}",
                command=command,
                status=e.status if isinstance(e.status, int) else None,
                stderr=stderr
            ) from e

    def _write_sparse_patterns(self) -> None:
        """Replace the sparse-checkout file with exactly the configured patterns."""
        sparse_file = self.config.sparse_checkout_file
        if not sparse_file.parent.is_dir():
            sparse_file.parent.mkdir(parents=True)
            self.identity.chown(sparse_file.parent)
        sparse_file.write_text("".join(f"{p}\n" for p in self.config.sparse_patterns), encoding="utf-8")
        self.identity.chown(sparse_file)
