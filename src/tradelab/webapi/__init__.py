"""HTTP proxy that forwards oracle message requests with the server-held key."""

from .app import create_app

__all__ = ["create_app"]
