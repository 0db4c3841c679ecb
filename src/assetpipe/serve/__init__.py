"""Development server with live reload."""

from .reload import LiveReloadHub
from .server import DevServer, create_app, inject_snippet

__all__ = ["DevServer", "LiveReloadHub", "create_app", "inject_snippet"]
