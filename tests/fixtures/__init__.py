"""Shared pytest fixtures."""

from .core import *  # noqa: F401,F403
from .gateway import *  # noqa: F401,F403
