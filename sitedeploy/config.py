"""Configuration management for sitedeploy."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv

from .errors import ConfigurationError
from .platform import normalize_path

load_dotenv()  # Load .env file if it exists


DEFAULT_REPO_URL = "http://gitea/youruser/example.git"
DEFAULT_TARGET_DIR = "/var/www/html/yourdomain"
DEFAULT_BRANCH = "main"
DEFAULT_DEPLOY_USER = "www-data"
DEFAULT_LOG_FILE = "/var/log/update_sites.log"
DEFAULT_SPARSE_PATTERNS = ("_site/*",)


@dataclass(frozen=True)
class Config:
    """Deployment configuration, built once at startup and passed explicitly."""

    # Remote source of truth
    repo_url: str = DEFAULT_REPO_URL
    branch: str = DEFAULT_BRANCH
    remote_name: str = "origin"

    # Local checkout
    target_dir: Path = Path(DEFAULT_TARGET_DIR)
    deploy_user: str = DEFAULT_DEPLOY_USER
    sparse_patterns: Tuple[str, ...] = DEFAULT_SPARSE_PATTERNS

    # Fetch retries
    retry_attempts: int = 5
    retry_delay: float = 10.0

    # Logging
    log_file: Path = Path(DEFAULT_LOG_FILE)
    log_level: str = "INFO"

    def __post_init__(self):
        """Normalize paths and validate values after initialization."""
        # Frozen dataclass: normalized values have to go through object.__setattr__
        object.__setattr__(self, "target_dir", normalize_path(self.target_dir))
        object.__setattr__(self, "log_file", normalize_path(self.log_file))
        object.__setattr__(self, "sparse_patterns", tuple(self.sparse_patterns))
        object.__setattr__(self, "log_level", self.log_level.upper())

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            raise ConfigurationError(f"Invalid log level: {self.log_level}. Must be one of {valid_log_levels}")

        if self.retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1")

        if self.retry_delay < 0:
            raise ConfigurationError("retry_delay must be non-negative")

        if not self.repo_url:
            raise ConfigurationError("repo_url must not be empty")

        if not self.branch:
            raise ConfigurationError("branch must not be empty")

        if not self.deploy_user:
            raise ConfigurationError("deploy_user must not be empty")

        if not self.sparse_patterns:
            raise ConfigurationError("at least one sparse checkout pattern is required")

    @property
    def git_dir(self) -> Path:
        """Git metadata directory inside the target."""
        return self.target_dir / ".git"

    @property
    def sparse_checkout_file(self) -> Path:
        """Pattern file read by git in sparse checkout mode."""
        return self.git_dir / "info" / "sparse-checkout"

    @property
    def remote_ref(self) -> str:
        """Remote-tracking ref the local branch is reset to."""
        return f"{self.remote_name}/{self.branch}"


def load_configuration() -> Config:
    """Load configuration from environment variables, falling back to the built-in defaults."""
    try:
        return Config(
            repo_url=os.getenv("SITEDEPLOY_REPO_URL", DEFAULT_REPO_URL),
            target_dir=Path(os.getenv("SITEDEPLOY_TARGET_DIR", DEFAULT_TARGET_DIR)),
            branch=os.getenv("SITEDEPLOY_BRANCH", DEFAULT_BRANCH),
            deploy_user=os.getenv("SITEDEPLOY_DEPLOY_USER", DEFAULT_DEPLOY_USER),
            log_file=Path(os.getenv("SITEDEPLOY_LOG_FILE", DEFAULT_LOG_FILE)),
            log_level=os.getenv("SITEDEPLOY_LOG_LEVEL", "INFO"),
            retry_attempts=int(os.getenv("SITEDEPLOY_RETRY_ATTEMPTS", "5")),
            retry_delay=float(os.getenv("SITEDEPLOY_RETRY_DELAY", "10")),
        )
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Configuration error: {e}") from e


def validate_configuration(config: Config) -> List[str]:
    """Validate configuration and return any errors or warnings."""
    errors = []

    if not config.repo_url.startswith(("http://", "https://", "ssh://", "git@", "file://", "/")):
        errors.append(f"WARNING: Git remote URL may be invalid: {config.repo_url}")

    if config.target_dir == Path("/"):
        errors.append("ERROR: Refusing to deploy into the filesystem root")

    if config.target_dir.exists() and not config.target_dir.is_dir():
        errors.append(f"ERROR: Target path exists and is not a directory: {config.target_dir}")

    for pattern in config.sparse_patterns:
        if "\n" in pattern or not pattern.strip():
            errors.append(f"ERROR: Invalid sparse checkout pattern: {pattern!r}")

    if config.retry_delay > 300:
        errors.append("WARNING: Retry delay above five minutes will stall deployments")

    return errors
