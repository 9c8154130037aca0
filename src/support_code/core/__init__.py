from .config import ConfigManager
from .exceptions import (
    SupportCodeError,
    InvalidArgumentError,
    ConfigurationError,
    SupportCodeLoadError,
)

__all__ = [
    # Configuration
    "ConfigManager",

    # Exceptions
    "SupportCodeError",
    "InvalidArgumentError",
    "ConfigurationError",
    "SupportCodeLoadError",
]
