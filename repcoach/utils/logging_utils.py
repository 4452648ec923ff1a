import logging
from repcoach.config import config


def level_for(debug_mode: str) -> int:
    """Quiet frame loop unless a debug mode asks for rep and session tracing."""
    return logging.WARNING if debug_mode == "non_debug" else logging.INFO


def setup_logging():
    """
    Configure the root handler once and return the service logger.
    Store failures are logged at ERROR, so they show even in non_debug mode.
    """
    logging.basicConfig(
        level=level_for(config.debug_mode),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    return logging.getLogger("repcoach")


def apply_debug_mode():
    """Re-apply the level after config.setup_from_args() changed the mode."""
    logger.setLevel(level_for(config.debug_mode))

# Global logger instance - import this in other modules
logger = setup_logging()
