"""HTTP surface: health probes, version, metrics and the admin signal endpoint."""

from .server import Server, create_app

__all__ = ['Server', 'create_app']
