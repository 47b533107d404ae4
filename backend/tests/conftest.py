"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or seed on import
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("RBAC_SEED_ON_STARTUP", "false")
os.environ.setdefault("RBAC_REJECT_DUAL_REQUIREMENTS", "false")
