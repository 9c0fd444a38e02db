"""
Build job server module.

FastAPI application exposing job creation and log polling. The app is
built by create_app(), which wires the log service, submitter and settings.
"""

from .app import create_app

__all__ = ["create_app"]
