"""Directory listing rendering shared by the serverless and server front ends."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING
from urllib import request as urllib_request
from urllib.parse import quote

import jinja2

from drive_index.graph.client import graph_client_from_config
from drive_index.graph.drive import normalize_path
from drive_index.graph.errors import GraphApiError

if TYPE_CHECKING:
    from drive_index.config import AppConfig
    from drive_index.graph.drive import Drive
    from drive_index.graph.models import Item

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "drive.html"
TEMPLATE_FETCH_TIMEOUT = 10

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

BODY_NOT_FOUND = "Item Not Found."
BODY_SERVER_ERROR = "Internal Server Error."

_SIZE_UNIT = 1024
_SIZE_PREFIXES = "KMGTPE"


def size_to_readable(size: int) -> str:
    """Format a byte count with IEC units, e.g. ``1536 -> "1.5 KiB"``."""
    if size < _SIZE_UNIT:
        return f"{size} B"
    div, exp = _SIZE_UNIT, 0
    n = size // _SIZE_UNIT
    while n >= _SIZE_UNIT and exp < len(_SIZE_PREFIXES) - 1:
        div *= _SIZE_UNIT
        exp += 1
        n //= _SIZE_UNIT
    return f"{size / div:.1f} {_SIZE_PREFIXES[exp]}iB"


def date_to_readable(date: datetime | None, now: datetime | None = None) -> str:
    """Describe how long ago ``date`` was, e.g. ``"3 hour(s) ago"``."""
    if date is None:
        return ""
    if now is None:
        now = datetime.now(timezone.utc)
    elapsed = now - date
    minutes = elapsed.total_seconds() / 60
    hours = minutes / 60
    if hours < 1:
        if minutes < 1:
            return "recently"
        return f"{minutes:.0f} minute(s) ago"
    if hours < 24:
        return f"{hours:.0f} hour(s) ago"
    return f"{hours / 24:.0f} day(s) ago"


def current_path(path: str) -> str:
    """Return the request path in ``/a/b`` form; the root is ``/``."""
    return "/" + normalize_path(path)


def parent_path(path: str) -> str:
    """Return the parent of a request path, e.g. ``a/b/ -> /a``."""
    return posixpath.dirname(current_path(path))


@dataclass
class ListingEntry:
    """One row of a rendered directory listing."""

    name: str
    href: str
    readable_size: str
    date: datetime | None
    readable_date: str
    is_folder: bool

    @classmethod
    def from_item(cls, item: Item, current: str, now: datetime | None = None) -> ListingEntry:
        return cls(
            name=item.name,
            href=quote(posixpath.join(current, item.name)),
            readable_size=size_to_readable(item.size),
            date=item.last_modified_at,
            readable_date=date_to_readable(item.last_modified_at, now),
            is_folder=item.is_folder,
        )


@dataclass
class Listing:
    """Template context for a directory listing."""

    parent: str
    current: str
    items: list[ListingEntry] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.current == "/"


@dataclass
class BrowseResponse:
    """Front-end agnostic HTTP response produced by :class:`DriveBrowser`."""

    status_code: int
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def not_found(cls) -> BrowseResponse:
        return cls(404, BODY_NOT_FOUND, {"Content-Type": TEXT_CONTENT_TYPE})

    @classmethod
    def server_error(cls) -> BrowseResponse:
        return cls(500, BODY_SERVER_ERROR, {"Content-Type": TEXT_CONTENT_TYPE})

    @classmethod
    def redirect(cls, location: str) -> BrowseResponse:
        return cls(307, "", {"Location": location})


def load_template(source: str = "") -> jinja2.Template:
    """Load the listing template.

    Args:
        source: Empty for the bundled template, an http(s) URL to fetch, or
            a filesystem path.

    Returns:
        Compiled template with HTML autoescaping.

    Raises:
        OSError: If the template cannot be fetched or read.
        jinja2.TemplateError: If the template does not compile.
    """
    if not source:
        env = jinja2.Environment(
            loader=jinja2.PackageLoader("drive_index", "web/templates"),
            autoescape=jinja2.select_autoescape(),
        )
        return env.get_template(DEFAULT_TEMPLATE)

    if source.startswith(("http://", "https://")):
        logger.info("[load_template] fetching template; url:%s", source)
        with urllib_request.urlopen(source, timeout=TEMPLATE_FETCH_TIMEOUT) as resp:
            text = resp.read().decode("utf-8")
    else:
        logger.info("[load_template] reading template; path:%s", source)
        text = Path(source).read_text(encoding="utf-8")
    return jinja2.Environment(autoescape=True).from_string(text)


class DriveBrowser:
    """Maps a request path to a listing page, a download redirect or an error."""

    def __init__(self, drive: Drive, template: jinja2.Template) -> None:
        self._drive = drive
        self._template = template

    def browse(self, path: str) -> BrowseResponse:
        """Serve ``path``.

        Folders with children render as a listing. Otherwise the path is
        resolved as an item and redirected to its download URL. An
        ``itemNotFound`` API error becomes a 404; every other failure,
        including an item without a download URL, becomes a 500.
        """
        try:
            children = self._drive.list_children(path)
            if not children:
                return self._redirect_to_download(path)
            return self._render(path, children)
        except GraphApiError as exc:
            if exc.is_item_not_found:
                logger.info("[browse] item not found; path:%s", path)
                return BrowseResponse.not_found()
            logger.error("[browse] graph api error; path:%s", path, exc_info=True)
            return BrowseResponse.server_error()
        except Exception:
            logger.error("[browse] request failed; path:%s", path, exc_info=True)
            return BrowseResponse.server_error()

    def _redirect_to_download(self, path: str) -> BrowseResponse:
        item = self._drive.item(path)
        if not item.download_url:
            logger.error("[browse] item has no download url; path:%s;item_id:%s", path, item.id)
            return BrowseResponse.server_error()
        return BrowseResponse.redirect(item.download_url)

    def _render(self, path: str, children: list[Item]) -> BrowseResponse:
        current = current_path(path)
        now = datetime.now(timezone.utc)
        listing = Listing(
            parent=parent_path(path),
            current=current,
            items=[ListingEntry.from_item(child, current, now) for child in children],
        )
        body = self._template.render(listing=listing)
        return BrowseResponse(200, body, {"Content-Type": HTML_CONTENT_TYPE})


def drive_browser_from_config(config: AppConfig) -> DriveBrowser:
    """Construct a DriveBrowser from application configuration.

    Creates a GraphClient (acquiring its first token), binds it to the
    configured drive and loads the listing template.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveBrowser instance.
    """
    client = graph_client_from_config(config)
    return DriveBrowser(client.get_drive(config.drive_id), load_template(config.view))
