from __future__ import annotations

import json

from typer.testing import CliRunner

from webcite import cli

runner = CliRunner()

PAGE_HTML = """
<html><head>
  <meta property="og:title" content="Local   page">
  <meta property="og:site_name" content="Example">
  <meta name="author" content="By Jane Smith">
  <meta name="date" content="2020-02-03">
</head><body></body></html>
"""


def test_config_json_masks_credentials(monkeypatch):
    monkeypatch.setenv("WEBCITE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("WEBCITE_HTTP_TIMEOUT", "5")
    monkeypatch.setenv("DEEPL_API_KEY", "super-secret")

    result = runner.invoke(cli.app, ["config", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["log_level"] == "DEBUG"
    assert payload["http_timeout"] == 5.0
    assert payload["deepl_api_key"] == "set"
    assert "super-secret" not in result.stdout


def test_cite_local_file_as_wiki(tmp_path, monkeypatch):
    monkeypatch.setenv("WEBCITE_LOG_LEVEL", "ERROR")
    page = tmp_path / "page.html"
    page.write_text(PAGE_HTML, encoding="utf-8")

    result = runner.invoke(cli.app, ["cite", str(page), "--no-archive"])

    assert result.exit_code == 0
    assert "{{cite web" in result.stdout
    assert "| title = Local page" in result.stdout
    assert "| last = Smith" in result.stdout
    assert "| date = 2020-02-03" in result.stdout


def test_cite_local_file_as_json(tmp_path, monkeypatch):
    monkeypatch.setenv("WEBCITE_LOG_LEVEL", "ERROR")
    page = tmp_path / "page.html"
    page.write_text(PAGE_HTML, encoding="utf-8")

    result = runner.invoke(cli.app, ["cite", str(page), "--no-archive", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["type"] == "NewsArticle"
    assert payload["fields"]["site"] == "Example"
    assert payload["citations"]["harvard"].startswith("Smith, J. (2020) 'Local page', Example.")


def test_cite_rejects_unknown_priority(tmp_path, monkeypatch):
    monkeypatch.setenv("WEBCITE_LOG_LEVEL", "ERROR")
    page = tmp_path / "page.html"
    page.write_text(PAGE_HTML, encoding="utf-8")

    result = runner.invoke(cli.app, ["cite", str(page), "--priority", "opengraph,bogus"])

    assert result.exit_code != 0


def test_cite_missing_file_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.setenv("WEBCITE_LOG_LEVEL", "ERROR")

    result = runner.invoke(cli.app, ["cite", str(tmp_path / "absent.html"), "--no-archive"])

    assert result.exit_code == 1
