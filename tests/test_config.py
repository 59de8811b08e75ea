"""
Configuration loading tests: YAML sections, environment substitution,
.env handling and credential fallback.
"""

import textwrap

import pytest

from versifi.config import (
    Credentials, RestConfig, WebSocketConfig, load_config, parse_credentials, parse_section,
    substitute_env_vars,
)
from versifi.infrastructure.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    # set first so that undo also removes values written by load_dotenv
    for name in ("VERSIFI_API_KEY", "VERSIFI_API_SECRET", "VERSIFI_CONFIG", "VERSIFI_WS_URL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("")
    return path


def write_config(tmp_path, content: str):
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(content))
    return path


class TestSubstitution:

    def test_set_variable(self, clean_env):
        clean_env.setenv("VERSIFI_WS_URL", "wss://stream.example/v1/ws")
        assert substitute_env_vars("url: ${VERSIFI_WS_URL}") == "url: wss://stream.example/v1/ws"

    def test_default_used_when_unset(self, clean_env):
        assert substitute_env_vars("url: ${VERSIFI_WS_URL:wss://fallback/ws}") == "url: wss://fallback/ws"

    def test_unset_without_default_is_empty(self, clean_env):
        assert substitute_env_vars("key: '${VERSIFI_API_KEY}'") == "key: ''"


class TestSections:

    def test_websocket_defaults(self):
        config = parse_section(None, WebSocketConfig, "websocket")
        assert config.idle_timeout == 60
        assert config.keepalive_interval == 30
        assert config.auto_reconnect is True
        assert config.reconnect_delay == 5
        assert config.auth_timeout == 10
        assert config.auth_expiry_lead == 300
        assert config.delivery_mode == "sync"
        assert config.local_bind is None

    def test_lenient_numbers(self):
        config = parse_section({"idle_timeout": "20", "local_addr": "10.0.0.5"}, WebSocketConfig, "websocket")
        assert config.idle_timeout == 20.0
        assert config.local_bind == ("10.0.0.5", 0)

    @pytest.mark.parametrize("data", [
        {"url": "http://wrong-scheme"},
        {"idle_timeout": 0},
        {"delivery_mode": "threads"},
        {"auth_timeout": "soon"},
    ])
    def test_invalid_websocket_values(self, data):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_section(data, WebSocketConfig, "websocket")
        assert exc_info.value.setting_name == "websocket"

    def test_invalid_rest_url(self):
        with pytest.raises(ConfigurationError):
            parse_section({"base_url": "ftp://api"}, RestConfig, "rest")


class TestCredentials:

    def test_from_yaml_section(self, clean_env):
        creds = parse_credentials({"api_key": "k", "secret_key": "s"})
        assert creds == Credentials(api_key="k", secret_key="s")

    def test_environment_fallback(self, clean_env):
        clean_env.setenv("VERSIFI_API_KEY", "env-key")
        clean_env.setenv("VERSIFI_API_SECRET", "env-secret")
        creds = parse_credentials(None)
        assert creds.is_configured()
        assert creds.api_key == "env-key"

    def test_half_configured_rejected(self, clean_env):
        with pytest.raises(ConfigurationError):
            parse_credentials({"api_key": "only-key"})

    def test_preview_hides_key(self):
        creds = Credentials(api_key="abcdefghijkl", secret_key="s")
        assert creds.get_preview() == "abcd...ijkl"
        assert not Credentials(api_key="", secret_key="").is_configured()


class TestLoadConfig:

    def test_full_file(self, tmp_path, clean_env, env_file):
        clean_env.setenv("VERSIFI_API_SECRET", "from-env")
        path = write_config(tmp_path, """
            credentials:
              api_key: yaml-key
              secret_key: ${VERSIFI_API_SECRET}
            rest:
              base_url: https://api.example.test
              timeout: 10
            websocket:
              url: ${VERSIFI_WS_URL:wss://stream.example.test/v1/ws}
              idle_timeout: 30
              auto_reconnect: false
              delivery_mode: queued
            logging:
              environment: test
              console:
                enabled: true
                min_level: ERROR
                color: false
        """)

        config = load_config(path, env_file=env_file)

        assert config.credentials == Credentials(api_key="yaml-key", secret_key="from-env")
        assert config.rest.base_url == "https://api.example.test"
        assert config.rest.timeout == 10
        assert config.websocket.url == "wss://stream.example.test/v1/ws"
        assert config.websocket.keepalive_interval == 15
        assert config.websocket.auto_reconnect is False
        assert config.websocket.delivery_mode == "queued"
        assert config.logging.console.min_level == "ERROR"

    def test_config_path_from_environment(self, tmp_path, clean_env, env_file):
        path = write_config(tmp_path, """
            websocket:
              reconnect_delay: 1
        """)
        clean_env.setenv("VERSIFI_CONFIG", str(path))

        config = load_config(env_file=env_file)

        assert config.websocket.reconnect_delay == 1.0
        assert config.logging is None

    def test_env_file_supplies_credentials(self, tmp_path, clean_env):
        env_path = tmp_path / "creds.env"
        env_path.write_text("VERSIFI_API_KEY=dotenv-key\nVERSIFI_API_SECRET=dotenv-secret\n")
        path = write_config(tmp_path, "rest: {}\n")

        config = load_config(path, env_file=env_path)

        assert config.credentials.api_key == "dotenv-key"
        assert config.credentials.secret_key == "dotenv-secret"

    def test_missing_file(self, tmp_path, env_file):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "absent.yaml", env_file=env_file)

    def test_missing_env_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(env_file=tmp_path / "absent.env")

    def test_bad_yaml(self, tmp_path, env_file):
        path = tmp_path / "config.yaml"
        path.write_text("websocket: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(path, env_file=env_file)

    def test_top_level_must_be_mapping(self, tmp_path, env_file):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(path, env_file=env_file)
