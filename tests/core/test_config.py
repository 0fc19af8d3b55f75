"""Tests for configuration management.

Tests cover:
- AppCredential key validation
- CallbackConfig and LoggingConfig validation
- YouduConfig loading from YAML, JSON and environment variables
- Environment variable expansion
"""

from __future__ import annotations

import base64
import json
import os

import pytest
from pydantic import ValidationError

from youdu_app.core.config import (
    DEFAULT_CALLBACK_PATH,
    AppCredential,
    CallbackConfig,
    YouduConfig,
)
from youdu_app.errors import ConfigError

AES_KEY = base64.b64encode(bytes(range(32))).decode()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from YOUDU_APP_* variables and a local .env file."""
    for name in list(os.environ):
        if name.startswith("YOUDU_APP_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


# ==============================================================================
# AppCredential Tests
# ==============================================================================


class TestAppCredential:
    """Tests for AppCredential."""

    def test_valid(self):
        credential = AppCredential(buin=666666, app_id="A1", aes_key=AES_KEY)

        assert credential.key == bytes(range(32))
        assert "aes_key" not in repr(credential)

    def test_short_key(self):
        with pytest.raises(ConfigError):
            AppCredential(buin=1, app_id="A1", aes_key=base64.b64encode(b"short").decode())

    def test_invalid_base64(self):
        with pytest.raises(ConfigError):
            AppCredential(buin=1, app_id="A1", aes_key="%%%")

    def test_empty_app_id(self):
        with pytest.raises(ValidationError):
            AppCredential(buin=1, app_id="", aes_key=AES_KEY)

    def test_frozen(self):
        credential = AppCredential(buin=1, app_id="A1", aes_key=AES_KEY)
        with pytest.raises(ValidationError):
            credential.app_id = "A2"


# ==============================================================================
# CallbackConfig Tests
# ==============================================================================


class TestCallbackConfig:
    """Tests for CallbackConfig."""

    def test_default_values(self):
        config = CallbackConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8899
        assert config.path == DEFAULT_CALLBACK_PATH == "/receive/youdu/msg"
        assert config.workers == 4
        assert config.queue_size == 1000

    def test_path_must_be_absolute(self):
        with pytest.raises(ValidationError):
            CallbackConfig(path="receive")

    def test_workers_positive(self):
        with pytest.raises(ValidationError):
            CallbackConfig(workers=0)


# ==============================================================================
# YouduConfig Tests
# ==============================================================================


class TestYouduConfig:
    """Tests for YouduConfig."""

    def test_minimal(self):
        config = YouduConfig(buin=666666, app_id="A1", aes_key=AES_KEY)

        assert config.server_addr == "http://localhost:7080"
        assert config.timeout is None
        assert config.callback.path == DEFAULT_CALLBACK_PATH
        assert config.logging.level == "INFO"
        assert config.credential().key == bytes(range(32))

    def test_server_addr_validation(self):
        with pytest.raises(ValidationError):
            YouduConfig(buin=1, app_id="A1", aes_key=AES_KEY, server_addr="youdu:7080")

        config = YouduConfig(
            buin=1, app_id="A1", aes_key=AES_KEY, server_addr="https://im.example.com/ "
        )
        assert config.server_addr == "https://im.example.com"

    def test_bad_key_detected_by_credential(self):
        config = YouduConfig(buin=1, app_id="A1", aes_key="not-a-key")

        with pytest.raises(ConfigError):
            config.credential()

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("YOUDU_APP_BUIN", "666666")
        monkeypatch.setenv("YOUDU_APP_APP_ID", "yd-env")
        monkeypatch.setenv("YOUDU_APP_AES_KEY", AES_KEY)
        monkeypatch.setenv("YOUDU_APP_CALLBACK__PORT", "9000")

        config = YouduConfig()  # type: ignore[call-arg]

        assert config.buin == 666666
        assert config.app_id == "yd-env"
        assert config.callback.port == 9000

    def test_from_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_YOUDU_KEY", AES_KEY)
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "buin: 666666\n"
            "app_id: yd37D192\n"
            "aes_key: ${TEST_YOUDU_KEY}\n"
            "server_addr: http://10.0.0.5:7080\n"
            "timeout: 5\n"
            "callback:\n"
            "  port: 9100\n"
            "  path: /hooks/youdu\n"
            "logging:\n"
            "  level: debug\n",
            encoding="utf-8",
        )

        config = YouduConfig.load(config_file)

        assert config.aes_key == AES_KEY
        assert config.server_addr == "http://10.0.0.5:7080"
        assert config.timeout == 5.0
        assert config.callback.port == 9100
        assert config.callback.path == "/hooks/youdu"
        assert config.logging.level == "DEBUG"

    def test_from_json(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps({"buin": 1, "app_id": "A1", "aes_key": AES_KEY}), encoding="utf-8"
        )

        config = YouduConfig.load(config_file)

        assert config.buin == 1
        assert config.app_id == "A1"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            YouduConfig.from_yaml(tmp_path / "missing.yaml")
        with pytest.raises(ConfigError, match="not found"):
            YouduConfig.from_json(tmp_path / "missing.json")

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("buin: [1, 2\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            YouduConfig.from_yaml(config_file)

    def test_invalid_json(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{buin: 1", encoding="utf-8")

        with pytest.raises(ConfigError):
            YouduConfig.from_json(config_file)

    def test_missing_required_fields(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("", encoding="utf-8")

        with pytest.raises(ValidationError):
            YouduConfig.from_yaml(config_file)
