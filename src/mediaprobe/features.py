"""Feature detection for external mediaprobe dependencies.

Detects whether the ffprobe executable the probe cache relies on is installed.
"""

import logging
import shutil

logger = logging.getLogger("mediaprobe")


def check_ffprobe_available(executable: str) -> bool:
    """Check if the ffprobe executable can be found.

    Args:
        executable: Binary name (looked up on ``PATH``) or absolute path

    Returns:
        True if the executable exists, False otherwise
    """
    found = shutil.which(executable)
    if found:
        logger.info(f"ffprobe detected at {found} - probe tools available")
        return True
    logger.warning(f"ffprobe not found ({executable}) - every probe will fail until it is installed")
    return False


def get_available_features(executable: str) -> dict[str, bool]:
    """Get a dictionary of available features.

    Returns:
        Dict mapping feature name to availability status
    """
    return {
        "ffprobe": check_ffprobe_available(executable),
    }
