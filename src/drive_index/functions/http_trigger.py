"""HTTP trigger blueprint — serves drive listings and download redirects."""

import logging
import threading

import azure.functions as func

from drive_index.config import load_config
from drive_index.web.listing import BrowseResponse, DriveBrowser, drive_browser_from_config

logger = logging.getLogger(__name__)

bp = func.Blueprint()


_browser: DriveBrowser | None = None
_browser_lock = threading.Lock()


def get_browser() -> DriveBrowser:
    """Build the DriveBrowser once per worker process.

    The GraphClient it wraps keeps its token between invocations. Concurrent
    first calls wait on the lock so only one token exchange happens.
    """
    global _browser
    browser = _browser
    if browser is None:
        with _browser_lock:
            browser = _browser
            if browser is None:
                logger.info("[get_browser] initialising drive browser")
                browser = _browser = drive_browser_from_config(load_config())
    return browser


def reset_browser() -> None:
    """Drop the cached DriveBrowser so the next call rebuilds it."""
    global _browser
    with _browser_lock:
        _browser = None


def to_http_response(response: BrowseResponse) -> func.HttpResponse:
    return func.HttpResponse(
        response.body,
        status_code=response.status_code,
        headers=response.headers,
    )


@bp.route(route="{*path}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def browse(req: func.HttpRequest) -> func.HttpResponse:
    """Render the folder at the request path or redirect to the file's download URL."""
    path = req.route_params.get("path") or ""
    logger.info("[browse] request; path:%s", path)

    try:
        browser = get_browser()
    except Exception:
        logger.error("[browse] drive browser initialisation failed", exc_info=True)
        return to_http_response(BrowseResponse.server_error())

    return to_http_response(browser.browse(path))
