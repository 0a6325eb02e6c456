"""Test environment: settings must exist before caveworld modules are imported."""

import os

os.environ["JWT_SECRET"] = "test-secret-for-caveworld-unit-tests-0123456789"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")
