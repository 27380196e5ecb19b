"""Unit tests for server.py — Flask front end and CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml

from drive_index.server import create_app, main, parse_listen, write_default_config
from drive_index.web.listing import BrowseResponse

# ---------------------------------------------------------------------------
# Flask app
# ---------------------------------------------------------------------------


class TestCreateApp:
    def test_root_browses_empty_path(self) -> None:
        browser = MagicMock()
        browser.browse.return_value = BrowseResponse(
            200, "<html>root</html>", {"Content-Type": "text/html; charset=utf-8"}
        )

        response = create_app(browser).test_client().get("/")

        browser.browse.assert_called_once_with("")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "<html>root</html>"
        assert response.headers["Content-Type"] == "text/html; charset=utf-8"

    def test_nested_path_is_passed_through(self) -> None:
        browser = MagicMock()
        browser.browse.return_value = BrowseResponse(200, "ok")

        create_app(browser).test_client().get("/docs/My%20File.txt")

        browser.browse.assert_called_once_with("docs/My File.txt")

    def test_redirect(self) -> None:
        browser = MagicMock()
        browser.browse.return_value = BrowseResponse.redirect("https://dl.example/a?sig=1")

        response = create_app(browser).test_client().get("/a.pdf")

        assert response.status_code == 307
        assert response.headers["Location"] == "https://dl.example/a?sig=1"

    def test_not_found(self) -> None:
        browser = MagicMock()
        browser.browse.return_value = BrowseResponse.not_found()

        response = create_app(browser).test_client().get("/missing")

        assert response.status_code == 404
        assert response.get_data(as_text=True) == "Item Not Found."


# ---------------------------------------------------------------------------
# parse_listen
# ---------------------------------------------------------------------------


class TestParseListen:
    def test_port_only_binds_all_interfaces(self) -> None:
        assert parse_listen(":8086") == ("0.0.0.0", 8086)

    def test_host_and_port(self) -> None:
        assert parse_listen("127.0.0.1:9000") == ("127.0.0.1", 9000)

    @pytest.mark.parametrize("listen", ["", "8086", "host:", "host:http"])
    def test_invalid(self, listen: str) -> None:
        with pytest.raises(ValueError):
            parse_listen(listen)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestMain:
    def test_new_writes_default_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"

        assert main(["--conf", str(path), "new"]) == 0

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["listen"] == ":8086"
        assert data["tenant"] == ""

    def test_write_default_config(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        write_default_config(path)
        assert set(yaml.safe_load(path.read_text(encoding="utf-8"))) == {
            "tenant",
            "application",
            "secret",
            "drive",
            "view",
            "listen",
        }

    def test_missing_config_file_fails(self, tmp_path: Path) -> None:
        assert main(["--conf", str(tmp_path / "missing.yaml")]) == 1

    def test_startup_failure_fails(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("tenant: t\nlisten: ':8086'\n", encoding="utf-8")

        with patch(
            "drive_index.server.drive_browser_from_config", side_effect=ValueError("bad")
        ):
            assert main(["--conf", str(path)]) == 1

    def test_serves_on_configured_address(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "tenant: t\napplication: a\nsecret: s\ndrive: d\nlisten: 127.0.0.1:9000\n",
            encoding="utf-8",
        )
        mock_browser = MagicMock()
        mock_app = MagicMock()

        with (
            patch(
                "drive_index.server.drive_browser_from_config", return_value=mock_browser
            ) as mock_factory,
            patch("drive_index.server.create_app", return_value=mock_app) as mock_create,
        ):
            assert main(["--conf", str(path)]) == 0

        assert mock_factory.call_args[0][0].drive_id == "d"
        mock_create.assert_called_once_with(mock_browser)
        mock_app.run.assert_called_once_with(host="127.0.0.1", port=9000)
