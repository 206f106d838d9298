"""Root conftest: shared test configuration."""

import os

# Settings are cached on first use: pin a local database and a test secret
# before anything imports guildhall.config
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_PUBLIC_KEY", "guildhall-test-secret-key-0123456789abcdef")
os.environ.setdefault("JWT_ALGORITHMS", '["HS256"]')
os.environ.setdefault("LOG_FORMAT", "text")
