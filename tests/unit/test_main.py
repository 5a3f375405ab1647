"""
Unit tests for the command-line interface.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from bark_lead_decoder import main as cli
from bark_lead_decoder.config import AppConfig
from bark_lead_decoder.exceptions import FetchError
from bark_lead_decoder.models.lead import RawDocument
from bark_lead_decoder.storage.contact_store import ContactStore


@pytest.fixture
def app_config(mock_env_vars, monkeypatch):
    """Fresh configuration pointing at temporary paths."""
    config = AppConfig()
    monkeypatch.setattr(cli, "config", config)
    monkeypatch.setattr("bark_lead_decoder.pipeline.decode_pipeline.default_app_config", config)
    return config


@pytest.fixture
def page_file(tmp_path, directory_html):
    path = tmp_path / "page.html"
    path.write_text(directory_html, encoding="utf-8")
    return path


class TestMain:
    """Tests for the CLI commands."""

    def test_version(self, capsys):
        assert cli.main(["--version"]) == 0
        assert "Bark Lead Decoder v" in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert cli.main([]) == 1

    def test_decode(self, app_config, page_file, capsys):
        exit_code = cli.main(["decode", "--file", str(page_file), "--locale", "us"])

        assert exit_code == 0
        leads = json.loads(capsys.readouterr().out)
        assert [lead["person_name"]["first_name"] for lead in leads] == ["Sarah", "James", "Unknown"]
        assert leads[0]["phones"]["primary"] == "+1 (555) 123-4567"
        assert leads[0]["lead_score"] == 100

    def test_locale_flag_honours_locale_file(self, app_config, page_file, tmp_path, capsys):
        locale_file = tmp_path / "locale.json"
        locale_file.write_text(json.dumps({"currency_symbol": "€"}), encoding="utf-8")
        app_config.locale_path = locale_file

        assert cli.main(["decode", "--file", str(page_file), "--locale", "us"]) == 0

        leads = json.loads(capsys.readouterr().out)
        assert leads[0]["phones"]["primary"] == "+1 (555) 123-4567"
        assert all(lead["estimated_value"].startswith("€") for lead in leads)

    def test_decode_requires_input(self, app_config):
        assert cli.main(["decode"]) == 1

    def test_import_then_list_and_status(self, app_config, page_file, capsys):
        assert cli.main(["import", "--file", str(page_file), "--locale", "us", "--user-id", "9"]) == 0
        out = capsys.readouterr().out
        assert "Stored:   2" in out
        assert "Rejected: 1" in out

        contacts, total = ContactStore(db_path=app_config.db_path).list_contacts()
        assert total == 2
        assert {c.created_by for c in contacts} == {9}
        assert {c.lead_source for c in contacts} == {"bark.co.uk"}

        assert cli.main(["list-contacts", "--source", "bark.co.uk"]) == 0
        out = capsys.readouterr().out
        assert "Showing 2 of 2 contacts" in out
        assert "James Wilson" in out

        assert cli.main(["status"]) == 0
        out = capsys.readouterr().out
        assert "Total contacts: 2" in out
        assert "bark.co.uk: 2" in out

    def test_export(self, app_config, page_file, tmp_path):
        cli.main(["import", "--file", str(page_file), "--locale", "us"])
        output = tmp_path / "contacts.json"

        assert cli.main(["export", "--format", "json", "--output", str(output)]) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data) == 2

    def test_import_from_url(self, app_config, directory_html, capsys):
        fetcher = MagicMock()
        fetcher.fetch.return_value = RawDocument(html=directory_html, source_url="https://www.bark.com/x/")

        with patch.object(cli, "PageFetcher", return_value=fetcher):
            assert cli.main(["import", "--url", "https://www.bark.com/x/", "--locale", "us"]) == 0

        fetcher.fetch.assert_called_once_with("https://www.bark.com/x/")
        assert "from https://www.bark.com/x/" in capsys.readouterr().out

    def test_fetch_failure(self, app_config):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = FetchError("Failed to fetch")

        with patch.object(cli, "PageFetcher", return_value=fetcher):
            assert cli.main(["decode", "--url", "https://www.bark.com/x/"]) == 1

    def test_invalid_configuration(self, app_config):
        app_config.locale_name = "fr"
        assert cli.main(["status"]) == 1
