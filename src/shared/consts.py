from enum import Enum


class EnumEnvironment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class EnumLogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Floor applied to daily consumption before it is used as a divisor.
MIN_DAILY_CONSUMPTION = 0.1

# Floor applied to any other denominator (capacities, totals, seasonal factors).
EPSILON = 1e-9

MIN_CONFIDENCE = 70
MAX_CONFIDENCE = 95

DEFAULT_CACHE_TTL_SECONDS = 300
