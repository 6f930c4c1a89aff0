"""HTTP boundary for the content engine."""

from contentengine.api.app import create_app

__all__ = ["create_app"]
