"""Root conftest - shared test configuration."""

import os

# Ensure tests never reach real stores or sign cookies with a real secret
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:1/bookstore-test")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")
