"""Application configuration loaded from environment variables or a YAML file."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_LISTEN = ":8086"

# YAML keys used by the server config file
KEY_TENANT = "tenant"
KEY_APPLICATION = "application"
KEY_SECRET = "secret"
KEY_DRIVE = "drive"
KEY_VIEW = "view"
KEY_LISTEN = "listen"


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    ``view`` names the listing template: empty for the bundled template,
    an http(s) URL, or a filesystem path. ``listen`` is only used by the
    long-running server.
    """

    tenant_id: str
    application_id: str
    client_secret: str
    drive_id: str

    view: str = ""
    listen: str = DEFAULT_LISTEN


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        TENANT_ID: Azure AD tenant ID.
        APP_ID: Azure AD application (client) ID.
        CLI_SECRET: Azure AD application client secret.
        DRIVE_ID: ID of the drive to browse.

    Optional environment variables:
        DRV_VIEW: Listing template URL or path (default: bundled template).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        tenant_id=os.environ["TENANT_ID"],
        application_id=os.environ["APP_ID"],
        client_secret=os.environ["CLI_SECRET"],
        drive_id=os.environ["DRIVE_ID"],
        view=os.environ.get("DRV_VIEW", ""),
    )


def parse_config(text: str) -> AppConfig:
    """Construct an AppConfig from YAML text.

    Missing keys load as empty strings; credential validation happens when
    the GraphClient is built.

    Raises:
        ValueError: If the document is not a YAML mapping.
    """
    data: Any = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("config file must contain a YAML mapping")
    return AppConfig(
        tenant_id=str(data.get(KEY_TENANT) or ""),
        application_id=str(data.get(KEY_APPLICATION) or ""),
        client_secret=str(data.get(KEY_SECRET) or ""),
        drive_id=str(data.get(KEY_DRIVE) or ""),
        view=str(data.get(KEY_VIEW) or ""),
        listen=str(data.get(KEY_LISTEN) or DEFAULT_LISTEN),
    )


def load_config_file(path: str | Path) -> AppConfig:
    """Read and parse a YAML config file."""
    return parse_config(Path(path).read_text(encoding="utf-8"))


def dump_config(config: AppConfig) -> str:
    """Serialize an AppConfig to YAML using the config-file keys."""
    return yaml.safe_dump(
        {
            KEY_TENANT: config.tenant_id,
            KEY_APPLICATION: config.application_id,
            KEY_SECRET: config.client_secret,
            KEY_DRIVE: config.drive_id,
            KEY_VIEW: config.view,
            KEY_LISTEN: config.listen,
        },
        sort_keys=False,
    )
