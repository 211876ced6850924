"""WebSocket-based live reload for development mode.

Monitors the TOC file for changes and notifies connected clients via
WebSocket so open pages rebuild their sidebar.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from booknav.core.loader import TocLoader

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and TOC file watching.

    Coordinates between the file system watcher and connected WebSocket
    clients to refresh sidebars when the TOC changes.
    """

    def __init__(self, loader: TocLoader) -> None:
        """Initialize the live reload manager.

        Args:
            loader: TocLoader whose file is watched and whose cache is invalidated
        """
        self._loader = loader
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload.

        Args:
            request: aiohttp request

        Returns:
            WebSocket response
        """
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Watch the TOC directory and broadcast reload events."""
        toc_path = self._loader.toc_path
        watch_dir = toc_path.parent
        if not watch_dir.exists():
            logger.warning(f"Live reload disabled, directory not found: {watch_dir}")
            return

        async for changes in awatch(watch_dir):
            if any(self._is_toc_change(change, path) for change, path in changes):
                await self.notify_changed()

    def _is_toc_change(self, change: Change, path_str: str) -> bool:
        if change == Change.deleted:
            return False
        return Path(path_str).resolve() == self._loader.toc_path.resolve()

    async def notify_changed(self) -> None:
        """Invalidate the cached tree and tell clients to reload."""
        self._loader.invalidate()
        logger.info(f"TOC changed: {self._loader.toc_path}")
        await self._broadcast_reload()

    async def _broadcast_reload(self) -> None:
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "path": str(self._loader.toc_path.name)})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket.

    Args:
        manager: LiveReloadManager instance

    Returns:
        List of route definitions
    """
    return [web.get("/ws/live-reload", manager.handle_websocket)]
