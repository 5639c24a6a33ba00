"""Tests for the Typer-based PT-Gen CLI."""
from __future__ import annotations

import importlib
import json
from typing import Any

import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

from ptgen.api import create_app
from ptgen.api.settings import PtGenSettings
from ptgen.cli import app as cli_app
from ptgen.cli import client as client_module
from ptgen.resolver import MemoryCache
from ptgen.tests.pages import DOUBAN_SUBJECT, DOUBAN_SUBJECT_URL, DOUBAN_SUGGEST, UpstreamRouter, html, json_response

cli_app_module = importlib.import_module("ptgen.cli.app")


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """Provide a TestClient and patch the CLI HTTP client factory."""

    router = UpstreamRouter(
        {
            "movie.douban.com/subject/1292052/": html(DOUBAN_SUBJECT),
            "movie.douban.com/j/subject_suggest": json_response(DOUBAN_SUGGEST),
        }
    )
    settings = PtGenSettings(apikey="secret", _env_file=None)
    test_client = TestClient(create_app(settings, fetcher=router.fetcher(), cache=MemoryCache()))

    def _factory(base_url: str, *, timeout: float = 60.0, transport: Any = None):  # type: ignore[override]
        return test_client

    monkeypatch.setattr(client_module, "create_client", _factory)
    monkeypatch.setattr(cli_app_module, "create_client", _factory)
    return test_client


def test_gen_prints_envelope(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(cli_app.app, ["gen", DOUBAN_SUBJECT_URL, "--apikey", "secret"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert payload["sid"] == "1292052"


def test_gen_format_only_prints_description(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(
        cli_app.app,
        ["gen", "--site", "douban", "--sid", "1292052", "--format-only"],
        env={"PTGEN_APIKEY": "secret"},
    )

    assert result.exit_code == 0
    assert result.stdout.startswith("[img]https://img1.doubanio.com/")
    assert "◎片　　名　The Shawshank Redemption" in result.stdout


def test_gen_exits_non_zero_on_failure(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(cli_app.app, ["gen", "https://example.com/nothing", "--apikey", "secret"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["success"] is False


def test_gen_requires_a_target(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(cli_app.app, ["gen", "--site", "douban"])

    assert result.exit_code == 2


def test_wrong_apikey_exits_non_zero(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(cli_app.app, ["gen", DOUBAN_SUBJECT_URL, "--apikey", "nope"])

    assert result.exit_code == 1
    assert json.loads(result.stdout) == {"error": "apikey required."}


def test_search_lists_candidates(runner: CliRunner, cli_client: TestClient) -> None:
    result = runner.invoke(cli_app.app, ["search", "肖申克", "--apikey", "secret"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["data"][0]["link"] == DOUBAN_SUBJECT_URL
