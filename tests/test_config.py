"""
Tests for configuration loading.
"""

import json
import os

import pytest
import yaml

from restbase.config import (
    ApiConfig,
    RestBaseConfig,
    get_config,
    load_config,
    load_config_from_env,
    merge_configs,
    save_config,
    set_config,
)
from restbase.utils.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No RESTBASE_ variables and no config file in the working directory."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("RESTBASE_"):
            monkeypatch.delenv(key)
    return tmp_path


def test_defaults():
    config = RestBaseConfig()

    assert config.server.port == 8000
    assert config.api.prefix == "/api"
    assert config.api.allow_hosts == ["localhost", "localhost:8000"]
    assert config.api.allow_paths == ["api/*"]
    assert config.api.per_page == 10
    assert config.api.per_page_limit == 100
    assert config.api.auth_enabled is False


@pytest.mark.parametrize("prefix,expected", [("api", "/api"), ("/v1/", "/v1"), ("/", ""), ("", "")])
def test_prefix_is_normalized(prefix, expected):
    assert ApiConfig(prefix=prefix).prefix == expected


def test_list_settings_accept_comma_separated_strings():
    api = ApiConfig(allow_hosts="example.com, api.example.com", api_keys="one,two")

    assert api.allow_hosts == ["example.com", "api.example.com"]
    assert api.api_keys == ["one", "two"]


def test_page_sizes_must_be_positive():
    with pytest.raises(ValueError):
        ApiConfig(per_page_limit=0)


def test_env_parsing():
    config = load_config_from_env({
        "RESTBASE_API__PER_PAGE_LIMIT": "50",
        "RESTBASE_API__AUTH_ENABLED": "true",
        "RESTBASE_API__ALLOW_HOSTS": "example.com,localhost",
        "RESTBASE_SERVER__PORT": "9000",
        "RESTBASE_DATABASE__URL": "sqlite:///data.db",
        "OTHER_SETTING": "ignored",
    })

    assert config == {
        "api": {
            "per_page_limit": 50,
            "auth_enabled": True,
            "allow_hosts": "example.com,localhost",
        },
        "server": {"port": 9000},
        "database": {"url": "sqlite:///data.db"},
    }


def test_merge_configs_is_recursive():
    merged = merge_configs(
        {"api": {"prefix": "/api", "per_page": 10}, "server": {"port": 1}},
        {"api": {"per_page": 20}},
    )

    assert merged == {"api": {"prefix": "/api", "per_page": 20}, "server": {"port": 1}}


def test_load_config_file_and_env(clean_env, monkeypatch):
    path = clean_env / "restbase.yaml"
    path.write_text(yaml.dump({"api": {"prefix": "/v2", "per_page": 25}}))
    monkeypatch.setenv("RESTBASE_API__PER_PAGE", "30")

    config = load_config(str(path))

    assert config.api.prefix == "/v2"
    assert config.api.per_page == 30
    assert get_config() is config


def test_load_config_finds_default_file(clean_env):
    (clean_env / "restbase.json").write_text(json.dumps({"api": {"allow_paths": ["v1/*"]}}))

    assert load_config().api.allow_paths == ["v1/*"]


def test_load_config_without_env_override(clean_env, monkeypatch):
    monkeypatch.setenv("RESTBASE_SERVER__PORT", "9100")

    assert load_config(env_override=False).server.port == 8000


def test_load_config_missing_file(clean_env):
    with pytest.raises(FileNotFoundError):
        load_config(str(clean_env / "missing.yaml"))


def test_load_config_invalid_values(clean_env, monkeypatch):
    monkeypatch.setenv("RESTBASE_SERVER__LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError, match="Configuration validation failed"):
        load_config()


def test_load_config_invalid_yaml(clean_env):
    path = clean_env / "broken.yaml"
    path.write_text("api: [unclosed")

    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_save_config(clean_env):
    set_config(RestBaseConfig(api={"prefix": "/v3", "per_page": 7}))

    save_config(str(clean_env / "out" / "restbase.yaml"))

    saved = yaml.safe_load((clean_env / "out" / "restbase.yaml").read_text())
    assert saved["api"]["prefix"] == "/v3"
    assert saved["api"]["per_page"] == 7


def test_save_config_unsupported_format(clean_env):
    set_config(RestBaseConfig())

    with pytest.raises(ConfigurationError):
        save_config(str(clean_env / "restbase.toml"))
