"""Smoke tests — validate the Azure Functions HTTP trigger end-to-end."""

import threading
import time
from unittest.mock import MagicMock, patch

import azure.functions as func

from drive_index.functions import http_trigger
from drive_index.web.listing import BrowseResponse


def _request(path: str | None) -> MagicMock:
    req = MagicMock(spec=func.HttpRequest)
    req.route_params = {} if path is None else {"path": path}
    return req


def test_browse_returns_listing() -> None:
    """Browse endpoint passes the route path through and returns the page."""
    mock_browser = MagicMock()
    mock_browser.browse.return_value = BrowseResponse(
        200, "<html>docs</html>", {"Content-Type": "text/html; charset=utf-8"}
    )

    with patch.object(http_trigger, "get_browser", return_value=mock_browser):
        response = http_trigger.browse(_request("docs"))

    mock_browser.browse.assert_called_once_with("docs")
    assert response.status_code == 200
    assert response.get_body() == b"<html>docs</html>"


def test_browse_root_without_route_param() -> None:
    mock_browser = MagicMock()
    mock_browser.browse.return_value = BrowseResponse(200, "root")

    with patch.object(http_trigger, "get_browser", return_value=mock_browser):
        http_trigger.browse(_request(None))

    mock_browser.browse.assert_called_once_with("")


def test_browse_redirect_sets_location() -> None:
    mock_browser = MagicMock()
    mock_browser.browse.return_value = BrowseResponse.redirect("https://dl.example/f")

    with patch.object(http_trigger, "get_browser", return_value=mock_browser):
        response = http_trigger.browse(_request("f.txt"))

    assert response.status_code == 307
    assert response.headers.get("Location") == "https://dl.example/f"


def test_browse_initialisation_failure_is_500() -> None:
    with patch.object(http_trigger, "get_browser", side_effect=KeyError("TENANT_ID")):
        response = http_trigger.browse(_request("docs"))

    assert response.status_code == 500
    assert response.get_body() == b"Internal Server Error."


def test_get_browser_is_built_once() -> None:
    http_trigger.reset_browser()
    try:
        with (
            patch.object(http_trigger, "load_config") as mock_load,
            patch.object(http_trigger, "drive_browser_from_config") as mock_factory,
        ):
            first = http_trigger.get_browser()
            second = http_trigger.get_browser()

        assert first is second
        mock_load.assert_called_once()
        mock_factory.assert_called_once_with(mock_load.return_value)
    finally:
        http_trigger.reset_browser()


def test_concurrent_first_calls_build_browser_once() -> None:
    http_trigger.reset_browser()
    barrier = threading.Barrier(4)
    results: list[object] = []

    def slow_factory(config: object) -> MagicMock:
        time.sleep(0.05)
        return MagicMock()

    def call() -> None:
        barrier.wait()
        results.append(http_trigger.get_browser())

    try:
        with (
            patch.object(http_trigger, "load_config"),
            patch.object(
                http_trigger, "drive_browser_from_config", side_effect=slow_factory
            ) as mock_factory,
        ):
            threads = [threading.Thread(target=call) for _ in range(4)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=5)

        assert mock_factory.call_count == 1
        assert len(results) == 4
        assert all(browser is results[0] for browser in results)
    finally:
        http_trigger.reset_browser()
