"""
Unit tests for configuration and the CLI flag layering.
"""

import pytest

from shorturl.config import ServerConfig
from shorturl.__main__ import build_parser, build_config


ENV_VARS = [
    "SHORTURL_HOST", "SHORTURL_PORT", "SHORTURL_TIMEOUT", "SHORTURL_MAX_BODY_SIZE",
    "SHORTURL_WORKERS", "SHORTURL_REQUIRE_AUTH", "SHORTURL_AUTH", "SHORTURL_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.timeout is None
        assert config.max_header_size == 8192
        assert config.max_body_size == 100 * 1024
        assert config.max_attempts == 10
        assert config.workers == 0
        assert config.require_auth is True
        assert config.auth_credentials == ""

    def test_defaults_validate(self):
        ServerConfig().validate()

    def test_from_env_defaults(self, clean_env):
        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env(self, clean_env):
        clean_env.setenv("SHORTURL_HOST", "0.0.0.0")
        clean_env.setenv("SHORTURL_PORT", "9000")
        clean_env.setenv("SHORTURL_TIMEOUT", "2.5")
        clean_env.setenv("SHORTURL_MAX_BODY_SIZE", "1024")
        clean_env.setenv("SHORTURL_WORKERS", "3")
        clean_env.setenv("SHORTURL_REQUIRE_AUTH", "false")
        clean_env.setenv("SHORTURL_AUTH", "alice:wonderland")
        clean_env.setenv("SHORTURL_LOG_LEVEL", "debug")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.timeout == 2.5
        assert config.max_body_size == 1024
        assert config.workers == 3
        assert config.require_auth is False
        assert config.auth_credentials == "alice:wonderland"
        assert config.log_level == "DEBUG"

    def test_bad_boolean(self, clean_env):
        clean_env.setenv("SHORTURL_REQUIRE_AUTH", "maybe")

        with pytest.raises(ValueError):
            ServerConfig.from_env()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"timeout": 0},
        {"max_header_size": 0},
        {"max_body_size": -1},
        {"max_attempts": -1},
        {"workers": -1},
        {"queue_size": 0},
        {"log_level": "LOUD"},
        {"auth_credentials": "no-colon"},
    ])
    def test_validate_rejects(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()


class TestCLI:

    def test_no_flags_uses_env(self, clean_env):
        clean_env.setenv("SHORTURL_PORT", "9000")

        config = build_config(build_parser().parse_args([]))

        assert config.port == 9000
        assert config.require_auth is True

    def test_flags_override_env(self, clean_env):
        clean_env.setenv("SHORTURL_PORT", "9000")
        clean_env.setenv("SHORTURL_WORKERS", "2")

        args = build_parser().parse_args([
            "--port", "7000", "-w", "5", "--host", "0.0.0.0",
            "--timeout", "3", "--max-body-size", "512", "--no-auth", "-l", "debug",
        ])
        config = build_config(args)

        assert config.port == 7000
        assert config.workers == 5
        assert config.host == "0.0.0.0"
        assert config.timeout == 3.0
        assert config.max_body_size == 512
        assert config.require_auth is False
        assert config.log_level == "DEBUG"

    def test_secret_only_from_env(self, clean_env):
        clean_env.setenv("SHORTURL_AUTH", "alice:wonderland")

        config = build_config(build_parser().parse_args([]))

        assert config.auth_credentials == "alice:wonderland"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "shorturl" in capsys.readouterr().out
