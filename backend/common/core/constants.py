from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


# Usage windows supported by the dashboard daily series
SUPPORTED_USAGE_WINDOWS = (7, 30)
