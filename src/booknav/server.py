"""aiohttp server for Booknav.

Application factory and route registration for standalone server mode.
"""

from aiohttp import web

from booknav.api.config import create_config_routes
from booknav.api.navigation import create_navigation_routes
from booknav.api.sidebar import create_sidebar_routes
from booknav.app_keys import (
    build_dir_key,
    live_reload_enabled_key,
    live_reload_manager_key,
    sessions_key,
    sidebar_config_key,
    toc_loader_key,
)
from booknav.config import Config
from booknav.core.loader import TocLoader
from booknav.live import LiveReloadManager
from booknav.live.reload import create_live_reload_routes
from booknav.sessions import SessionRegistry


async def serve_book(request: web.Request) -> web.FileResponse:
    """Serve built book files.

    Directory URLs serve their default document. Paths escaping the build
    directory are not found.
    """
    build_dir = request.app[build_dir_key].resolve()
    default_document = request.app[sidebar_config_key].default_document
    target = (build_dir / request.match_info["path"]).resolve()

    if not target.is_relative_to(build_dir):
        raise web.HTTPNotFound()
    if target.is_dir():
        target = target / default_document
    if not target.is_file():
        raise web.HTTPNotFound()
    return web.FileResponse(target)


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    loader = TocLoader(config.book.toc_file)

    app[toc_loader_key] = loader
    app[sessions_key] = SessionRegistry()
    app[sidebar_config_key] = config.sidebar
    app[live_reload_enabled_key] = config.live_reload.enabled

    # API routes (must be registered first to take precedence over book files)
    app.router.add_routes(create_config_routes())
    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_sidebar_routes())

    if config.live_reload.enabled:
        manager = LiveReloadManager(loader)
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    # Book files - must be last to catch all non-API routes
    if config.book.build_dir.is_dir():
        app[build_dir_key] = config.book.build_dir
        app.router.add_get("/{path:.*}", serve_book)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    await app[live_reload_manager_key].stop()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
