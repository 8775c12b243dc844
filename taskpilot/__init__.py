"""TaskPilot - a console chat agent with task handling."""

__version__ = "0.1.0"

from taskpilot.config import Config
from taskpilot.main import main

__all__ = ["Config", "main", "__version__"]
