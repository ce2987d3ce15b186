"""
Common utilities shared across gobin_rebuild modules.
"""

from __future__ import annotations

import os


DEBUG_ENV_VAR = "GOBIN_REBUILD_DEBUG"


def debug_enabled() -> bool:
    """Check whether debug output was requested through the environment."""
    return os.environ.get(DEBUG_ENV_VAR, "0") == "1"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or debug_enabled():
        from .logging_config import get_logger
        get_logger().info(msg)
