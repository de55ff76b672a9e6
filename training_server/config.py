#!/usr/bin/env python3
"""
Configuration for the training server.

All settings come from environment variables (or a .env file loaded by the
process manager). create_app() accepts a dictionary that overrides any of them.
"""

import os

# ============================================================================
# Flask SECRET_KEY (Development default provided, change in production!)
# ============================================================================

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")

# Warn if using default secret key
if SECRET_KEY == "dev-secret-key-change-in-production":
    import warnings
    warnings.warn(
        "Using default SECRET_KEY! This is INSECURE for production.\n"
        "Set SECRET_KEY in .env file or run: export SECRET_KEY=$(openssl rand -hex 32)",
        RuntimeWarning,
        stacklevel=2
    )

# ============================================================================
# Database
# ============================================================================

# SQLAlchemy URL; defaults to a sqlite file next to the package
DATABASE_URL = os.getenv("DATABASE_URL")

# ============================================================================
# Provisioning service (remote blueprint/application API)
# ============================================================================

PROVISIONING_API_URL = os.getenv("PROVISIONING_API_URL", "https://cloud.ravellosystems.com/api/v1")

# Per-request socket timeout (seconds) for provisioning calls
PROVISIONING_TIMEOUT = float(os.getenv("PROVISIONING_TIMEOUT", "30"))

PROVISIONING_VERIFY_SSL = os.getenv("PROVISIONING_VERIFY_SSL", "True").lower() in ("true", "1", "yes")
