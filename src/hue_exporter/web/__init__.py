"""HTTP exposition endpoint for hue-exporter"""

from .app import create_app

__all__ = ["create_app"]
