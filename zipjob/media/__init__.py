"""
File Transfer Layer.

This package is responsible for downloading job items and packaging them
into archives.
"""

from .fetcher import Fetcher, validate_item_url
from .packager import pack

__all__ = ["Fetcher", "pack", "validate_item_url"]
