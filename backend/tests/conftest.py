"""Test environment: cheap bcrypt, no rate limiting, no external services.

Set before any ``app`` module is imported so the cached Settings pick it up.
"""
import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SENTRY_DSN", "")
