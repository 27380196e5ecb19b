"""Drive accessor — resource paths for listing children and resolving items."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from drive_index.graph.models import ODATA_VALUE, Item

if TYPE_CHECKING:
    from drive_index.graph.client import GraphClient

logger = logging.getLogger(__name__)

ROOT_MARKER = "root"


def normalize_path(path: str) -> str:
    """Strip leading and trailing separators from a drive path."""
    return path.strip("/")


def _is_root(path: str) -> bool:
    return path in ("", ROOT_MARKER)


class Drive:
    """A drive identified by ``drive_id``, read through a shared GraphClient."""

    def __init__(self, drive_id: str, client: GraphClient) -> None:
        self.drive_id = drive_id
        self.client = client

    def __repr__(self) -> str:
        return f"Drive(drive_id={self.drive_id!r})"

    def children_resource(self, path: str) -> str:
        path = normalize_path(path)
        if _is_root(path):
            return f"/drives/{self.drive_id}/items/root/children"
        return f"/drives/{self.drive_id}/items/root:/{path}:/children"

    def item_resource(self, path: str) -> str:
        # The non-root form addresses /root:/ directly, without /items/.
        path = normalize_path(path)
        if _is_root(path):
            return f"/drives/{self.drive_id}/items/root"
        return f"/drives/{self.drive_id}/root:/{path}"

    def list_children(self, path: str) -> list[Item]:
        """List the children of the folder at ``path``.

        An empty list is returned both for an empty folder and for a path
        that names a file; callers tell them apart with :meth:`item`.

        Args:
            path: Folder path relative to the drive root ("", "/" and "root"
                all name the root).

        Returns:
            Child items, at most MAX_PAGE_SIZE of them.
        """
        response = self.client.get(self.children_resource(path))
        items = [Item.from_graph(raw) for raw in response.get(ODATA_VALUE) or []]
        logger.debug(
            "[list_children] listed; drive_id:%s;path:%s;item_count:%d",
            self.drive_id,
            path,
            len(items),
        )
        return items

    def item(self, path: str) -> Item:
        """Resolve ``path`` to a single file or folder record."""
        return Item.from_graph(self.client.get(self.item_resource(path)))
