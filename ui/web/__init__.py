"""
Web UI Module - FastAPI-based web interface
===========================================

This module provides the HTTP surface of the support agent:
- Chat endpoint used by the customer chat widget
- Chat analytics dashboard
- Knowledge base browsing
- Status endpoint
"""

from .app import create_app, run_app
from .routes import router

__all__ = [
    "create_app",
    "run_app",
    "router",
]
