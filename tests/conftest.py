"""Test configuration and fixtures for the bookstore service."""

import os

# Must be set before the application context loads its configuration
os.environ.setdefault("APP_ENVIRONMENT", "test")

from tests.fixtures import *  # noqa: E402,F401,F403
