"""Application keys for type-safe app configuration access."""

from pathlib import Path

from aiohttp import web

from booknav.config import SidebarConfig
from booknav.core.loader import TocLoader
from booknav.live import LiveReloadManager
from booknav.sessions import SessionRegistry

toc_loader_key = web.AppKey("toc_loader", TocLoader)
sessions_key = web.AppKey("sessions", SessionRegistry)
sidebar_config_key = web.AppKey("sidebar_config", SidebarConfig)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)
build_dir_key = web.AppKey("build_dir", Path)
