"""drizzleaudit utilities package."""

from .constants import (
    CONFIG_FILE_NAME,
    ERROR_LOG_FILE,
    MAX_FILE_SIZE,
    SKIP_DIRS,
    SOURCE_EXTENSIONS,
    STATE_DIR,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .finding_priority import (
    PRIORITY_ORDER,
    SEVERITY_MAPPINGS,
    get_sort_key,
    normalize_severity,
    sort_findings,
)
from .logging import logger

__all__ = [
    "STATE_DIR",
    "ERROR_LOG_FILE",
    "CONFIG_FILE_NAME",
    "MAX_FILE_SIZE",
    "SKIP_DIRS",
    "SOURCE_EXTENSIONS",
    "handle_exceptions",
    "ExitCodes",
    "PRIORITY_ORDER",
    "SEVERITY_MAPPINGS",
    "get_sort_key",
    "normalize_severity",
    "sort_findings",
    "logger",
]
