"""
Storage Layer.

This package holds the in-memory job registry and the configuration file
manager.
"""

from .config_manager import ConfigManager
from .job_store import JobStore

__all__ = ["ConfigManager", "JobStore"]
