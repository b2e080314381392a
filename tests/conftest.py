"""Root conftest — shared test configuration."""

import os

# Ensure tests never send real email or touch a real database
os.environ.setdefault("RESEND_API_KEY", "")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CLEANUP_API_KEY", "")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
