"""
Exception Definitions - Custom exceptions for the EcoRide Support Agent
======================================================================

This module defines the exceptions raised across the support agent.
Only InvalidInputError ever reaches a client as-is; read and write
failures against the store are absorbed by the services that raise them.
"""


class SupportAgentError(Exception):
    """
    Base exception for all support agent errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(SupportAgentError):
    """
    Configuration-related errors.

    Raised for unreadable or unparseable config files and for
    values that fail validation.
    """
    pass


class DatabaseError(SupportAgentError):
    """
    Database operation errors.

    Raised when a SQLite statement or transaction fails.
    """
    pass


class InvalidInputError(SupportAgentError):
    """
    Rejected client input.

    Raised before any processing when a chat request lacks its
    message or user identifier, or when an article carries an
    unknown category.
    """
    pass


class KnowledgeBaseError(SupportAgentError):
    """
    Knowledge base read failures.

    The chat path logs these and carries on with an empty article set.
    """
    pass


class ConversationLogError(SupportAgentError):
    """
    Conversation log write failures.

    Never propagated to the chat caller; the reply is returned anyway.
    """
    pass
