"""Navigation API endpoints.

Provides the full navigation tree and single-entry subtree endpoints.
"""

from aiohttp import web

from booknav.app_keys import toc_loader_key


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{idx}", get_navigation_entry),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    loader = request.app[toc_loader_key]
    try:
        tree = loader.load()
    except FileNotFoundError:
        return web.json_response({"error": "Navigation not found"}, status=404)
    except ValueError as e:
        return web.json_response(
            {"error": "Invalid navigation file", "detail": str(e)},
            status=500,
        )
    return web.json_response({"items": tree.to_dict()})


async def get_navigation_entry(request: web.Request) -> web.Response:
    raw_idx = request.match_info["idx"]
    loader = request.app[toc_loader_key]
    try:
        tree = loader.load()
    except FileNotFoundError:
        return web.json_response({"error": "Navigation not found"}, status=404)
    except ValueError as e:
        return web.json_response(
            {"error": "Invalid navigation file", "detail": str(e)},
            status=500,
        )

    if not raw_idx.isdigit() or int(raw_idx) >= len(tree):
        return web.json_response(
            {"error": "Entry not found", "idx": raw_idx},
            status=404,
        )

    idx = int(raw_idx)
    return web.json_response(
        {
            "item": tree.entry_to_dict(idx),
            "ancestors": tree.ancestors(idx),
        }
    )
