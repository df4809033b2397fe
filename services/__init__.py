"""
Services Module - Core services for the EcoRide Support Agent
=============================================================

This module provides the main services:
- Knowledge Base: published articles and keyword relevance
- Conversation Logger: fire-and-forget exchange persistence
- Chat Responder: rule table, knowledge base and fallback replies
"""

from .knowledge_base import Article, KnowledgeBase, find_relevant_articles
from .conversation_logger import ConversationLogger, ConversationRecord
from .chat_responder import ChatResponder, ChatResponse, compose_response

__all__ = [
    "Article",
    "KnowledgeBase",
    "find_relevant_articles",
    "ConversationLogger",
    "ConversationRecord",
    "ChatResponder",
    "ChatResponse",
    "compose_response",
]
