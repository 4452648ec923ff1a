from typing import Optional


class RepCoachError(Exception):
    """Base class for engine errors."""


class ConfigurationError(RepCoachError):
    """Raised at setup time when a counter or exercise cannot be configured."""


class SessionStoreError(RepCoachError):
    """A request to the remote session store failed or timed out."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
