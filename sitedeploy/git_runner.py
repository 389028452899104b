"""Git command execution under the deploy user's identity using GitPython."""

import logging
from pathlib import Path
from typing import Optional

import git
from git import GitCommandError

from .identity import DeployIdentity
from .platform import get_git_executable


class GitRunner:
    """
    Runs git subcommands inside one working directory as a given identity.

    The identity is applied when the subprocess is spawned: GitPython hands
    the extra keyword arguments to ``subprocess.Popen``, which switches uid,
    gid and supplementary groups in the child before exec. The parent
    process keeps root privileges throughout.
    """

    def __init__(self, working_dir: Path, identity: DeployIdentity):
        """
        Initialize GitRunner.

        Args:
            working_dir: Directory every command runs in; must already exist
            identity: User the commands run as
        """
        self.working_dir = Path(working_dir)
        self.identity = identity
        self.logger = logging.getLogger('sitedeploy.git')
        self._git = git.Git(str(self.working_dir))

    def run(self, *args: str) -> str:
        """
        Run ``git <args>`` and return its stripped stdout.

        Raises:
            GitCommandError: if git exits with a non-zero status
        """
        command = [get_git_executable(), *args]
        self.logger.debug(f"Running as {self.identity.name} in {self.working_dir}: {' '.join(command)}")
        return self._git.execute(
            command,
            env=self.identity.environment(),
            **self.identity.subprocess_kwargs()
        )

    def init(self) -> str:
        return self.run("init")

    def remote_add(self, name: str, url: str) -> str:
        return self.run("remote", "add", name, url)

    def config_set(self, key: str, value: str) -> str:
        return self.run("config", key, value)

    def sparse_checkout_init_no_cone(self) -> str:
        return self.run("sparse-checkout", "init", "--no-cone")

    def fetch(self, remote: str, branch: str) -> str:
        return self.run("fetch", remote, branch)

    def checkout_force(self, branch: str) -> str:
        return self.run("checkout", "-f", branch)

    def reset_hard(self, ref: str) -> str:
        return self.run("reset", "--hard", ref)

    def head_commit(self) -> Optional[str]:
        """Commit id of HEAD, or None when the repository has no commits yet."""
        try:
            return self.run("rev-parse", "--verify", "--quiet", "HEAD") or None
        except GitCommandError:
            return None
