"""Fixed-delay retry wrapper for git operations that touch the network."""

import logging
import time
from typing import Any, Callable

from git import GitCommandError

from .config import Config
from .errors import RetryExhaustedError


def retry_operation(
    operation_func: Callable[[], Any],
    operation: str,
    config: Config,
    sleep: Callable[[float], None] = time.sleep
) -> int:
    """
    Run ``operation_func`` until it succeeds, up to ``config.retry_attempts`` times.

    Every failed attempt logs one warning. The final error line carries
    the last failure reported by git. Attempts are separated by a fixed
    ``config.retry_delay`` sleep; there is no backoff and no jitter.

    Args:
        operation_func: Callable performing the operation; raising means failure
        operation: Description of the operation for logging
        config: Deployment configuration holding the retry bounds
        sleep: Sleep function, replaceable in tests

    Returns:
        Number of attempts used, counting the successful one

    Raises:
        RetryExhaustedError: when every attempt failed
    """
    logger = logging.getLogger('sitedeploy.retry')

    max_attempts = config.retry_attempts
    delay = config.retry_delay
    last_error = None
    detail = ""

    for attempt in range(1, max_attempts + 1):
        try:
            logger.debug(f"Executing {operation} (attempt {attempt}/{max_attempts})")
            operation_func()
            return attempt
        except (GitCommandError, OSError) as e:
            last_error = e
            raw = e.stderr if isinstance(e, GitCommandError) and e.stderr else str(e)
            detail = " ".join(raw.split())
            logger.debug(f"{operation} failed: {detail}")
            logger.warning(f"Warning: Attempt {attempt} failed! Trying again in {delay:g} seconds...")
            if attempt < max_attempts:
                sleep(delay)

    logger.error(f"Error: All {max_attempts} attempts failed! Last error: {detail}")
    raise RetryExhaustedError(
        f"{operation} failed after {max_attempts} attempts",
        operation=operation,
        attempts=max_attempts
    ) from last_error
