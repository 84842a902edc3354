"""
Configuration module for RWA Compliance.

Centralizes configuration with environment variable support.
"""

import os
from pathlib import Path

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("RWAC_ENV", "dev")  # dev|stage|prod

# Logging
LOG_LEVEL = os.getenv("RWAC_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("RWAC_LOG_FORMAT", "json")  # json|text
LOG_FILE = os.getenv("RWAC_LOG_FILE", "")

# Audit trail
AUDIT_SIGNING_KEY_PATH = os.getenv("RWAC_AUDIT_SIGNING_KEY_PATH", "")
AUDIT_MAX_EVENTS = int(os.getenv("RWAC_AUDIT_MAX_EVENTS", "0"))  # 0 = unbounded


def signing_key_configured() -> bool:
    return bool(AUDIT_SIGNING_KEY_PATH) and Path(AUDIT_SIGNING_KEY_PATH).exists()


# ============================================================
# Feature Flags
# ============================================================

def is_production() -> bool:
    """Check if running in production mode."""
    return ENV == "prod"


def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("RWAC_DEBUG", "").lower() in ("1", "true", "yes")
