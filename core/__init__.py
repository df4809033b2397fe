"""
Core Module - Foundation components for the EcoRide Support Agent
=================================================================

This module provides the foundational components including:
- Configuration management
- Database operations
- Logging setup
- Exception handling
"""

from .config import Config, load_config, save_config
from .database import Database, init_database
from .exceptions import (
    SupportAgentError,
    ConfigError,
    DatabaseError,
    InvalidInputError,
    KnowledgeBaseError,
    ConversationLogError,
)
from .logging import setup_logging, get_logger

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "Database",
    "init_database",
    "SupportAgentError",
    "ConfigError",
    "DatabaseError",
    "InvalidInputError",
    "KnowledgeBaseError",
    "ConversationLogError",
    "setup_logging",
    "get_logger",
]
