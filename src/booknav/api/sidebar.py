"""Sidebar API endpoints.

GET returns the sidebar for one page load of the requesting session,
consuming any scroll offset stored by the previous page. POST stores the
offset captured when a sidebar link is clicked and issues the session
cookie. Only POST creates sessions.
"""

from aiohttp import web

from booknav.app_keys import sessions_key, sidebar_config_key, toc_loader_key
from booknav.core.sidebar import SidebarController
from booknav.core.storage import MemoryStorage
from booknav.sessions import SESSION_COOKIE


def create_sidebar_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/sidebar", get_sidebar),
        web.post("/api/sidebar/scroll", post_scroll),
    ]


async def get_sidebar(request: web.Request) -> web.Response:
    page = request.query.get("page")
    if not page:
        return web.json_response({"error": "Missing page parameter"}, status=400)
    root_prefix = request.query.get("root", "")

    try:
        tree = request.app[toc_loader_key].load()
    except FileNotFoundError:
        return web.json_response({"error": "Navigation not found"}, status=404)
    except ValueError as e:
        return web.json_response(
            {"error": "Invalid navigation file", "detail": str(e)},
            status=500,
        )

    registry = request.app[sessions_key]
    session_id = request.cookies.get(SESSION_COOKIE)
    storage = registry.get(session_id)
    controller = SidebarController(
        tree,
        page,
        root_prefix,
        storage if storage is not None else MemoryStorage(),
        request.app[sidebar_config_key].to_options(),
    )
    state = controller.connect()
    if session_id is not None and storage is not None and not len(storage):
        # Nothing left to carry over to the next page
        registry.discard(session_id)

    return web.json_response(
        {
            "page": controller.page_url,
            "html": controller.render(),
            "state": state.to_dict(),
        }
    )


async def post_scroll(request: web.Request) -> web.Response:
    try:
        data = await request.json()
    except ValueError:
        return web.json_response({"error": "Invalid JSON body"}, status=400)

    scroll_top = data.get("scrollTop") if isinstance(data, dict) else None
    if not isinstance(scroll_top, int | float) or isinstance(scroll_top, bool):
        return web.json_response({"error": "scrollTop must be a number"}, status=400)

    try:
        offset = max(0, int(scroll_top))
    except (ValueError, OverflowError):
        return web.json_response({"error": "scrollTop must be finite"}, status=400)

    session_id, storage = request.app[sessions_key].get_or_create(
        request.cookies.get(SESSION_COOKIE)
    )
    storage.set_item(request.app[sidebar_config_key].storage_key, str(offset))

    response = web.Response(status=204)
    _set_session_cookie(response, session_id)
    return response


def _set_session_cookie(response: web.StreamResponse, session_id: str) -> None:
    response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="Lax")
