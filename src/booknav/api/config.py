"""Config API endpoint."""

from aiohttp import web

from booknav.app_keys import live_reload_enabled_key, sidebar_config_key


def create_config_routes() -> list[web.RouteDef]:
    return [web.get("/api/config", get_config)]


async def get_config(request: web.Request) -> web.Response:
    sidebar = request.app[sidebar_config_key]
    return web.json_response(
        {
            "liveReloadEnabled": request.app[live_reload_enabled_key],
            "storageKey": sidebar.storage_key,
            "indexAlias": sidebar.index_alias.value,
        }
    )
