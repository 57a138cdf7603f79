"""Read-only HTTP query service for a built corpus."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
