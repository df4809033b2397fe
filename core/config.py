"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


@dataclass
class ChatConfig:
    """
    Chat assistant configuration.

    Controls how exchanges are recorded once a reply is composed.
    """
    # Conversation logging
    log_conversations: bool = True
    background_logging: bool = True  # False = write inline before replying

    def validate(self) -> None:
        """Validate chat configuration parameters."""
        if not isinstance(self.log_conversations, bool):
            raise ConfigError(f"log_conversations must be a boolean, got {self.log_conversations!r}")

        if not isinstance(self.background_logging, bool):
            raise ConfigError(f"background_logging must be a boolean, got {self.background_logging!r}")


@dataclass
class KnowledgeBaseConfig:
    """
    Knowledge base storage configuration.

    Names the SQLite file inside the data directory and whether the
    sample help articles are inserted at startup.
    """
    database_file: str = "support.db"
    seed_sample_articles: bool = False

    def validate(self) -> None:
        """Validate knowledge base configuration."""
        if not self.database_file:
            raise ConfigError("database_file cannot be empty")


@dataclass
class UIConfig:
    """
    Web interface configuration.

    Server bind settings and the origins allowed to call the chat API.
    """
    web_host: str = "127.0.0.1"
    web_port: int = 8080
    web_debug: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Dashboard
    recent_conversations: int = 50

    def validate(self) -> None:
        """Validate UI configuration."""
        if self.web_port < 1 or self.web_port > 65535:
            raise ConfigError(f"Invalid web port: {self.web_port}")

        if self.recent_conversations < 1:
            raise ConfigError("recent_conversations must be at least 1")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for loading, saving, and validating.
    """
    # Application settings
    app_name: str = "EcoRide Support Agent"
    version: str = "1.0.0"
    debug: bool = False

    # Configuration sections
    chat: ChatConfig = field(default_factory=ChatConfig)
    knowledge_base: KnowledgeBaseConfig = field(default_factory=KnowledgeBaseConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    data_dir: str = ""
    log_dir: str = ""

    @property
    def database_path(self) -> str:
        """Full path of the SQLite database file."""
        return os.path.join(self.data_dir, self.knowledge_base.database_file)

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        self.chat.validate()
        self.knowledge_base.validate()
        self.ui.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "version": self.version,
            "debug": self.debug,
            "chat": asdict(self.chat),
            "knowledge_base": asdict(self.knowledge_base),
            "ui": asdict(self.ui),
            "data_dir": self.data_dir,
            "log_dir": self.log_dir,
        }


# Sections that can be set from config.yaml, keyed by YAML name
_SECTIONS = ("chat", "knowledge_base", "ui")


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if "ECORIDE_SUPPORT_CONFIG_DIR" in os.environ:
        return Path(os.environ["ECORIDE_SUPPORT_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "ecoride-support"

    return Path.home() / ".config" / "ecoride-support"


def get_default_data_dir() -> Path:
    """
    Get the default data directory path.

    Returns:
        Path to the data directory
    """
    if "ECORIDE_SUPPORT_DATA_DIR" in os.environ:
        return Path(os.environ["ECORIDE_SUPPORT_DATA_DIR"])

    if "XDG_DATA_HOME" in os.environ:
        return Path(os.environ["XDG_DATA_HOME"]) / "ecoride-support"

    return Path.home() / ".local" / "share" / "ecoride-support"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()

    config.config_dir = str(get_default_config_dir())
    config.data_dir = str(get_default_data_dir())
    config.log_dir = str(Path(config.data_dir) / "logs")

    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except IOError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored.

    Args:
        config: Config object to update
        yaml_config: Dictionary of configuration values from YAML
    """
    for key in ("app_name", "version", "debug"):
        if key in yaml_config:
            setattr(config, key, yaml_config[key])

    # Empty paths keep the runtime defaults
    for key in ("data_dir", "log_dir"):
        if yaml_config.get(key):
            setattr(config, key, str(yaml_config[key]))

    for section in _SECTIONS:
        values = yaml_config.get(section) or {}
        section_obj = getattr(config, section)
        for key, value in values.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: ECORIDE_SUPPORT_SECTION_KEY
    For example: ECORIDE_SUPPORT_UI_WEB_PORT, ECORIDE_SUPPORT_CHAT_LOG_CONVERSATIONS

    Args:
        config: Config object to update
    """
    env_mappings = {
        # Chat settings
        "ECORIDE_SUPPORT_CHAT_LOG_CONVERSATIONS": ("chat", "log_conversations", bool),
        "ECORIDE_SUPPORT_CHAT_BACKGROUND_LOGGING": ("chat", "background_logging", bool),

        # Knowledge base settings
        "ECORIDE_SUPPORT_KNOWLEDGE_BASE_DATABASE_FILE": ("knowledge_base", "database_file"),
        "ECORIDE_SUPPORT_KNOWLEDGE_BASE_SEED_SAMPLE_ARTICLES": (
            "knowledge_base", "seed_sample_articles", bool
        ),

        # UI settings
        "ECORIDE_SUPPORT_UI_WEB_HOST": ("ui", "web_host"),
        "ECORIDE_SUPPORT_UI_WEB_PORT": ("ui", "web_port", int),
        "ECORIDE_SUPPORT_UI_WEB_DEBUG": ("ui", "web_debug", bool),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section_obj = getattr(config, mapping[0])
        converter = mapping[2] if len(mapping) > 2 else str

        if converter == bool:
            converted = value.lower() in ("true", "1", "yes", "on")
        else:
            try:
                converted = converter(value)
            except ValueError:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}")

        setattr(section_obj, mapping[1], converted)


def save_config(config: Config, config_path: Optional[str] = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to save configuration (optional)

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except IOError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})


def create_default_config(config_dir: Optional[str] = None) -> Config:
    """
    Create a default configuration file with sensible defaults.

    Creates the configuration, data and log directories and writes
    a config.yaml that can be customized.

    Args:
        config_dir: Directory to create configuration in (optional)

    Returns:
        Config object with default values
    """
    config = Config()

    if config_dir:
        config.config_dir = config_dir
        config.data_dir = str(Path(config_dir) / "data")
        config.log_dir = str(Path(config_dir) / "logs")
    else:
        config.config_dir = str(get_default_config_dir())
        config.data_dir = str(get_default_data_dir())
        config.log_dir = str(Path(config.data_dir) / "logs")

    Path(config.config_dir).mkdir(parents=True, exist_ok=True)
    Path(config.data_dir).mkdir(parents=True, exist_ok=True)
    Path(config.log_dir).mkdir(parents=True, exist_ok=True)

    save_config(config)

    return config
