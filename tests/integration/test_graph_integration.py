"""Integration tests for Microsoft Graph API connectivity.

These tests require real Azure credentials and are skipped in CI/CD unless
the TENANT_ID environment variable is set.
"""

import os

import pytest

pytestmark = pytest.mark.skipif(
    not os.getenv("TENANT_ID"),
    reason="Real Graph credentials not available",
)


def test_list_root_real() -> None:
    """Connect to the real Graph API and list the drive root.

    Asserts that list_children() returns a list (possibly empty) and that
    the root resolves to a folder.
    """
    from drive_index.config import load_config
    from drive_index.graph.client import graph_client_from_config

    config = load_config()
    drive = graph_client_from_config(config).get_drive(config.drive_id)

    assert isinstance(drive.list_children(""), list)
    assert drive.item("/").is_folder
