"""
Test Configuration Module
========================

Unit tests for configuration loading and validation.
"""

import pytest
from pathlib import Path

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import (
    Config, ChatConfig, KnowledgeBaseConfig, UIConfig,
    load_config, save_config, create_default_config
)
from core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep config and data lookups inside the test directory."""
    monkeypatch.setenv("ECORIDE_SUPPORT_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("ECORIDE_SUPPORT_DATA_DIR", str(tmp_path / "data"))
    for name in (
        "ECORIDE_SUPPORT_UI_WEB_PORT",
        "ECORIDE_SUPPORT_CHAT_LOG_CONVERSATIONS",
        "ECORIDE_SUPPORT_CHAT_BACKGROUND_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)


class TestChatConfig:
    """Tests for ChatConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = ChatConfig()
        assert config.log_conversations is True
        assert config.background_logging is True

    def test_validation_invalid_flag(self):
        """Test non-boolean flags raise error."""
        config = ChatConfig(log_conversations="yes")
        with pytest.raises(ConfigError):
            config.validate()


class TestKnowledgeBaseConfig:
    """Tests for KnowledgeBaseConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = KnowledgeBaseConfig()
        assert config.database_file == "support.db"
        assert config.seed_sample_articles is False

    def test_validation_empty_file(self):
        """Test empty database file name raises error."""
        config = KnowledgeBaseConfig(database_file="")
        with pytest.raises(ConfigError):
            config.validate()


class TestUIConfig:
    """Tests for UIConfig."""

    def test_validation_invalid_port(self):
        """Test out-of-range port raises error."""
        config = UIConfig(web_port=70000)
        with pytest.raises(ConfigError):
            config.validate()

    def test_validation_invalid_recent_conversations(self):
        """Test dashboard window must be positive."""
        config = UIConfig(recent_conversations=0)
        with pytest.raises(ConfigError):
            config.validate()


class TestConfig:
    """Tests for main Config class."""

    def test_default_values(self):
        """Test default configuration values."""
        config = Config()
        assert config.app_name == "EcoRide Support Agent"
        assert config.chat is not None
        assert config.knowledge_base is not None

    def test_database_path(self):
        """Test database path joins data dir and file name."""
        config = Config(data_dir="/srv/ecoride")
        assert config.database_path == str(Path("/srv/ecoride") / "support.db")

    def test_to_dict(self):
        """Test conversion to dictionary."""
        d = Config().to_dict()
        assert "app_name" in d
        assert "chat" in d
        assert "knowledge_base" in d
        assert "ui" in d


class TestLoadConfig:
    """Tests for load_config and save_config."""

    def test_defaults_without_file(self, tmp_path):
        """Test defaults apply when no config file exists."""
        config = load_config()
        assert config.config_dir == str(tmp_path / "config")
        assert config.data_dir == str(tmp_path / "data")
        assert config.ui.web_port == 8080

    def test_yaml_values(self, tmp_path):
        """Test values are read from YAML."""
        path = tmp_path / "custom.yaml"
        path.write_text(
            "app_name: Test Desk\n"
            "chat:\n"
            "  background_logging: false\n"
            "ui:\n"
            "  web_port: 9000\n"
            "  unknown_key: ignored\n"
        )

        config = load_config(str(path))

        assert config.app_name == "Test Desk"
        assert config.chat.background_logging is False
        assert config.ui.web_port == 9000

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable YAML raises ConfigError."""
        path = tmp_path / "broken.yaml"
        path.write_text("ui: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_non_mapping_yaml(self, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_env_overrides(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("ECORIDE_SUPPORT_UI_WEB_PORT", "9100")
        monkeypatch.setenv("ECORIDE_SUPPORT_CHAT_LOG_CONVERSATIONS", "false")

        config = load_config()

        assert config.ui.web_port == 9100
        assert config.chat.log_conversations is False

    def test_env_invalid_int(self, monkeypatch):
        """Test non-numeric port raises ConfigError."""
        monkeypatch.setenv("ECORIDE_SUPPORT_UI_WEB_PORT", "eighty")
        with pytest.raises(ConfigError):
            load_config()

    def test_save_and_reload(self, tmp_path):
        """Test a saved config loads back with the same values."""
        config = Config()
        config.ui.web_port = 8181
        config.data_dir = str(tmp_path / "elsewhere")
        path = tmp_path / "saved.yaml"

        save_config(config, str(path))
        loaded = load_config(str(path), load_env=False)

        assert loaded.ui.web_port == 8181
        assert loaded.data_dir == str(tmp_path / "elsewhere")

    def test_create_default_config(self, tmp_path):
        """Test default config creates directories and a config file."""
        config = create_default_config(str(tmp_path / "setup"))

        assert (tmp_path / "setup" / "config.yaml").exists()
        assert Path(config.data_dir).is_dir()
        assert Path(config.log_dir).is_dir()
