"""
sitedeploy - Deploy a static site subtree from a Git remote into a web root.

Only the built output directory is materialized on disk, through a non-cone
sparse checkout, and every git command runs as the deploy user.
"""

import os

# GitPython probes for the git executable on import; git may be installed
# later by the preflight step, which refreshes GitPython afterwards.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

__version__ = "1.0.0"
__description__ = "Sparse-checkout static site deployment from a Git remote"

from .cli import main  # noqa: E402

__all__ = ["main"]
