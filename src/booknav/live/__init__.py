"""Live reload support for development mode."""

from booknav.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
