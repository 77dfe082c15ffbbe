"""
HTTP Layer.

This package exposes the job manager over HTTP with aiohttp.web.
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
