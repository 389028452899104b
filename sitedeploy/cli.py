"""Command line entry point for the ``update-sites`` script."""

import logging
import sys

from .config import load_configuration
from .deployer import SiteDeployer
from .errors import DeployError
from .log import setup_logging
from .preflight import run_preflight


def main() -> int:
    """
    Run one deployment with the host configuration.

    Returns:
        Process exit status: 0 on success, the error's exit code on a fatal error
    """
    logger = logging.getLogger('sitedeploy')

    try:
        config = load_configuration()
    except DeployError as e:
        # No log file yet; report on stderr
        print(f"Error: {e.message}", file=sys.stderr)
        return e.exit_code

    setup_logging(config)

    try:
        run_preflight(config)
        deployer = SiteDeployer(config)
        result = deployer.deploy()
    except DeployError as e:
        if not e.reported:
            logger.error(e.message)
        category = e.category.value if e.category else "unknown"
        logger.debug(f"Exiting with status {e.exit_code} after {category} error")
        return e.exit_code
    except Exception as e:
        logger.error(f"Error: Unexpected failure: {e}", exc_info=True)
        raise

    logger.debug(f"{result.operation} finished at {result.head_commit} after {result.attempts} fetch attempt(s)")
    return 0
