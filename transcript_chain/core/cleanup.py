"""
Cleanup: scoped temporary workspaces for download/transcription artifacts.
"""

import shutil
import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path

from transcript_chain.core.constants import WORKSPACE_PREFIX

logger = logging.getLogger(__name__)


def cleanup_workspace(workspace: Path):
    """
    Delete a workspace directory and everything in it.
    A missing directory is not an error.
    """
    if not workspace.exists():
        return
    try:
        shutil.rmtree(workspace)
        logger.debug("Deleted workspace: %s", workspace)
    except OSError as e:
        logger.warning("Failed to delete %s: %s", workspace, e)


@contextmanager
def scoped_workspace(prefix: str = WORKSPACE_PREFIX, parent: Path | None = None):
    """
    Create a fresh, uniquely named temporary directory and remove it on
    every exit path (normal return, exception, cancellation).
    """
    workspace = Path(tempfile.mkdtemp(prefix=prefix, dir=str(parent) if parent else None))
    logger.debug("Created workspace: %s", workspace)
    try:
        yield workspace
    finally:
        cleanup_workspace(workspace)
