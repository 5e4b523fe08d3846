"""HTTP surface for editor plugins."""

from sarthi.api.app import create_app

__all__ = ["create_app"]
