from typing import Optional

from .exchange import VersifiError


class ConfigurationError(VersifiError):
    """Configuration-specific exception for setup errors."""

    def __init__(self, message: str, setting_name: Optional[str] = None):
        self.setting_name = setting_name
        super().__init__(message)
