"""Test package. Pins an in-memory SQLite database and cheap bcrypt before userhub is imported."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["AUDIT_LOG_PATH"] = ""
os.environ["INACTIVITY_DAYS"] = "30"
