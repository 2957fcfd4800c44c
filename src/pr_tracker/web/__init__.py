"""Web interface for pr-tracker."""

from .app import create_app

__all__ = ["create_app"]
