"""
Tests for the restbase command-line interface.
"""

import json
import os

import pytest
from sqlalchemy import create_engine, inspect
from typer.testing import CliRunner

from restbase.__main__ import app
from restbase.utils.logging import console

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Run every command from an empty directory with a wide console."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("RESTBASE_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(console, "width", 200)
    return tmp_path


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "restbase" in result.output
    assert "API Version" in result.output


def test_routes():
    result = runner.invoke(app, ["routes", "widget_app:registry"])

    assert result.exit_code == 0
    assert "GET /api/widgets/{ids}" in result.output
    assert "WidgetTransformer" in result.output


def test_routes_uses_configured_registry():
    result = runner.invoke(app, ["routes"], env={"RESTBASE_API__REGISTRY": "widget_app:registry"})

    assert result.exit_code == 0
    assert "makers" in result.output


def test_routes_without_registry():
    result = runner.invoke(app, ["routes"])

    assert result.exit_code == 1


def test_routes_with_bad_target():
    result = runner.invoke(app, ["routes", "no_such_module:registry"])

    assert result.exit_code == 1


def test_config_show_json():
    result = runner.invoke(app, ["config", "show", "--format", "json"], env={"RESTBASE_API__PER_PAGE": "15"})

    assert result.exit_code == 0
    assert json.loads(result.output)["api"]["per_page"] == 15


def test_config_show_table():
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert "Api Configuration" in result.output
    assert "per_page_limit" in result.output


def test_config_save(isolated):
    result = runner.invoke(app, ["config", "save", "saved.yaml"])

    assert result.exit_code == 0
    assert (isolated / "saved.yaml").exists()


def test_config_save_unsupported_format():
    result = runner.invoke(app, ["config", "save", "saved.ini"])

    assert result.exit_code == 1


def test_invalid_config_file():
    result = runner.invoke(app, ["--config", "missing.yaml", "version"])

    assert result.exit_code == 1


def test_db_init(isolated):
    url = f"sqlite:///{isolated / 'widgets.db'}"

    result = runner.invoke(app, ["db", "init", "widget_app:registry"], env={"RESTBASE_DATABASE__URL": url})

    assert result.exit_code == 0
    tables = inspect(create_engine(url)).get_table_names()
    assert {"widgets", "makers", "parts"} <= set(tables)
