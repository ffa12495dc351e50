"""Centralized constants for drizzleaudit.

Single source of truth for output paths and the file-discovery limits
used by the host layer.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Primary output directory for drizzleaudit artifacts
STATE_DIR = Path("./.drizzleaudit")

# Log files
ERROR_LOG_FILE = STATE_DIR / "error.log"

# Project configuration file, relative to the scanned root
CONFIG_FILE_NAME = "config.json"

# ============================================================================
# FILE DISCOVERY
# ============================================================================

SOURCE_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs")

SKIP_DIRS = frozenset(
    [
        "node_modules",
        "dist",
        "build",
        ".git",
        ".next",
        ".turbo",
        "coverage",
        ".drizzleaudit",
    ]
)

# Files above this size are skipped (generated bundles, vendored code)
MAX_FILE_SIZE = 2 * 1024 * 1024

# Environment variable prefix for configuration overrides
ENV_PREFIX = "DRIZZLEAUDIT"
