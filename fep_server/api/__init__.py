"""
Local HTTP API — Flask front end for the FEP tools and the mirror.

This server is meant for local use and binds to 127.0.0.1 by default.
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
