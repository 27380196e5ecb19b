"""Data models for Microsoft Graph API drive items."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_WEB_URL = "webUrl"
FIELD_SIZE = "size"
FIELD_CREATED = "createdDateTime"
FIELD_LAST_MODIFIED = "lastModifiedDateTime"
FIELD_CREATED_BY = "createdBy"
FIELD_LAST_MODIFIED_BY = "lastModifiedBy"
FIELD_USER = "user"
FIELD_EMAIL = "email"
FIELD_DISPLAY_NAME = "displayName"
FIELD_PARENT_REFERENCE = "parentReference"
FIELD_DRIVE_ID = "driveId"
FIELD_DRIVE_TYPE = "driveType"
FIELD_PATH = "path"
FIELD_FILE_SYSTEM_INFO = "fileSystemInfo"
FIELD_FOLDER = "folder"
FIELD_CHILD_COUNT = "childCount"
FIELD_FILE = "file"
FIELD_MIME_TYPE = "mimeType"
FIELD_IMAGE = "image"
FIELD_HEIGHT = "height"
FIELD_WIDTH = "width"
FIELD_DOWNLOAD_URL = "@microsoft.graph.downloadUrl"

# OData response keys
ODATA_VALUE = "value"

# Graph emits up to seven fractional digits; datetime accepts at most six.
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def parse_datetime(value: str | None) -> datetime | None:
    """Parse a Graph ISO-8601 timestamp such as ``2020-04-01T10:00:00.1234567Z``."""
    if not value:
        return None
    text = _FRACTION_RE.sub(r".\1", value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass
class User:
    """Identity stub of the user who created or modified an item."""

    id: str = ""
    display_name: str = ""
    email: str = ""

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> User:
        return cls(
            id=raw.get(FIELD_ID, ""),
            display_name=raw.get(FIELD_DISPLAY_NAME, ""),
            email=raw.get(FIELD_EMAIL, ""),
        )


@dataclass
class ItemReference:
    """Pointer from an item to its parent folder."""

    drive_id: str = ""
    drive_type: str = ""
    id: str = ""
    path: str = ""

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> ItemReference:
        return cls(
            drive_id=raw.get(FIELD_DRIVE_ID, ""),
            drive_type=raw.get(FIELD_DRIVE_TYPE, ""),
            id=raw.get(FIELD_ID, ""),
            path=raw.get(FIELD_PATH, ""),
        )


@dataclass
class FileSystemInfo:
    """Timestamps as reported by the client that uploaded the item."""

    created_at: datetime | None = None
    last_modified_at: datetime | None = None


@dataclass(frozen=True)
class FolderFacet:
    child_count: int = 0


@dataclass(frozen=True)
class FileFacet:
    mime_type: str = ""


@dataclass(frozen=True)
class ImageFacet:
    height: int = 0
    width: int = 0


Facet = FolderFacet | FileFacet | ImageFacet


@dataclass
class Item:
    """A file or folder within a drive.

    The ``folder``, ``file`` and ``image`` facets are None when the API
    omits them. The API sends at most one of ``folder`` and ``file``; the
    model reports what it receives and does not enforce that.
    """

    id: str
    name: str
    web_url: str = ""
    size: int = 0
    created_at: datetime | None = None
    last_modified_at: datetime | None = None
    created_by: User = field(default_factory=User)
    last_modified_by: User = field(default_factory=User)
    parent_reference: ItemReference = field(default_factory=ItemReference)
    file_system_info: FileSystemInfo = field(default_factory=FileSystemInfo)
    folder: FolderFacet | None = None
    file: FileFacet | None = None
    image: ImageFacet | None = None
    download_url: str = ""

    @property
    def is_folder(self) -> bool:
        return self.folder is not None

    @property
    def facet(self) -> Facet | None:
        """Return the facet that determines the item's type, if any."""
        if self.folder is not None:
            return self.folder
        if self.file is not None:
            return self.file
        return self.image

    @classmethod
    def from_graph(cls, raw: dict[str, Any]) -> Item:
        """Map a raw Graph API driveItem dict to an Item."""
        fs_info = raw.get(FIELD_FILE_SYSTEM_INFO) or {}
        folder = raw.get(FIELD_FOLDER)
        file = raw.get(FIELD_FILE)
        image = raw.get(FIELD_IMAGE)
        return cls(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            web_url=raw.get(FIELD_WEB_URL, ""),
            size=int(raw.get(FIELD_SIZE, 0)),
            created_at=parse_datetime(raw.get(FIELD_CREATED)),
            last_modified_at=parse_datetime(raw.get(FIELD_LAST_MODIFIED)),
            created_by=User.from_graph((raw.get(FIELD_CREATED_BY) or {}).get(FIELD_USER) or {}),
            last_modified_by=User.from_graph(
                (raw.get(FIELD_LAST_MODIFIED_BY) or {}).get(FIELD_USER) or {}
            ),
            parent_reference=ItemReference.from_graph(raw.get(FIELD_PARENT_REFERENCE) or {}),
            file_system_info=FileSystemInfo(
                created_at=parse_datetime(fs_info.get(FIELD_CREATED)),
                last_modified_at=parse_datetime(fs_info.get(FIELD_LAST_MODIFIED)),
            ),
            folder=(
                FolderFacet(child_count=int(folder.get(FIELD_CHILD_COUNT, 0)))
                if folder is not None
                else None
            ),
            file=FileFacet(mime_type=file.get(FIELD_MIME_TYPE, "")) if file is not None else None,
            image=(
                ImageFacet(
                    height=int(image.get(FIELD_HEIGHT, 0)),
                    width=int(image.get(FIELD_WIDTH, 0)),
                )
                if image is not None
                else None
            ),
            download_url=raw.get(FIELD_DOWNLOAD_URL, ""),
        )
