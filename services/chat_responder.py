"""
Chat Responder - Rule table, knowledge base and fallback replies
================================================================

This module composes replies for the support chat. The rule table
answers first; when no rule matches, relevant knowledge base
articles are quoted; otherwise a fixed fallback is returned. Every
exchange is handed to the conversation logger.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict

from rules.engine import RulesEngine
from rules import templates
from core.exceptions import InvalidInputError
from core.logging import get_logger
from .knowledge_base import Article, KnowledgeBase, find_relevant_articles
from .conversation_logger import ConversationLogger, ConversationRecord

logger = get_logger("services.chat_responder")


# Articles quoted in a knowledge base answer
CONTEXT_ARTICLE_LIMIT = 3

# Articles listed in ``relevant_articles``
RELEVANT_ARTICLE_LIMIT = 2


@dataclass
class ChatResponse:
    """
    Result of answering one chat message.

    ``knowledge_base_used`` reports whether any published article
    matched, even when the reply itself came from the rule table.

    Attributes:
        response_text (str): Reply shown to the user, never empty
        knowledge_base_used (bool): At least one article matched
        relevant_articles (list): Up to two {title, category} entries
        source (str): 'rules', 'knowledge_base' or 'fallback'
        matched_rule (str): Name of the rule used, if any
    """
    response_text: str
    knowledge_base_used: bool
    relevant_articles: List[Dict[str, str]] = field(default_factory=list)
    source: str = "fallback"
    matched_rule: Optional[str] = None

    def to_payload(self) -> Dict[str, object]:
        """JSON body returned by the chat endpoint."""
        return {
            "response": self.response_text,
            "knowledgeBaseUsed": self.knowledge_base_used,
            "relevantArticles": list(self.relevant_articles),
        }


def compose_knowledge_base_answer(articles: List[Article]) -> str:
    """
    Quote up to three articles, followed by the closing prompt.

    Args:
        articles: Relevant articles, in store order

    Returns:
        Reply text
    """
    blocks = [
        templates.KNOWLEDGE_BASE_ARTICLE_BLOCK.format(title=article.title, content=article.content)
        for article in articles[:CONTEXT_ARTICLE_LIMIT]
    ]
    return templates.KNOWLEDGE_BASE_PREAMBLE + "".join(blocks) + templates.KNOWLEDGE_BASE_CLOSING_PROMPT


def compose_response(
    message: str,
    articles: List[Article],
    rules_engine: RulesEngine
) -> ChatResponse:
    """
    Build the reply for a message against a given article set.

    Pure with respect to its inputs; nothing is read or written.

    Args:
        message: Raw chat message
        articles: Published articles
        rules_engine: Rule table to consult first

    Returns:
        ChatResponse
    """
    relevant = find_relevant_articles(message, articles)
    summaries = [article.summary() for article in relevant[:RELEVANT_ARTICLE_LIMIT]]

    match = rules_engine.match(message.lower())
    if match:
        return ChatResponse(
            response_text=match.response,
            knowledge_base_used=bool(relevant),
            relevant_articles=summaries,
            source="rules",
            matched_rule=match.rule.name,
        )

    if relevant:
        return ChatResponse(
            response_text=compose_knowledge_base_answer(relevant),
            knowledge_base_used=True,
            relevant_articles=summaries,
            source="knowledge_base",
        )

    return ChatResponse(
        response_text=templates.FALLBACK_RESPONSE,
        knowledge_base_used=False,
        relevant_articles=[],
        source="fallback",
    )


class ChatResponder:
    """
    Answers support chat messages.

    Example:
        responder = ChatResponder(knowledge_base, conversation_logger)

        result = responder.respond("How fast can it go?", user_id="u-42")
        print(result.response_text)
    """

    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        conversation_logger: Optional[ConversationLogger] = None,
        rules_engine: Optional[RulesEngine] = None
    ):
        """
        Initialize the responder.

        Args:
            knowledge_base: Source of published articles
            conversation_logger: Where exchanges are recorded (optional)
            rules_engine: Rule table (defaults to the built-in one)
        """
        self.knowledge_base = knowledge_base
        self.conversation_logger = conversation_logger
        self.rules_engine = rules_engine or RulesEngine()

    def respond(self, message: str, user_id: str) -> ChatResponse:
        """
        Answer a message and record the exchange.

        A failing article fetch degrades to an empty article set and
        a failing conversation write is only logged; neither affects
        the returned reply.

        Args:
            message: The user's message
            user_id: Identifier of the user

        Returns:
            ChatResponse

        Raises:
            InvalidInputError: If message or user_id is empty
        """
        if not message or not user_id:
            raise InvalidInputError(templates.MISSING_FIELDS_ERROR)

        articles = self.knowledge_base.published_articles()
        result = compose_response(message, articles, self.rules_engine)

        logger.info(
            f"Answered via {result.source}"
            + (f" ({result.matched_rule})" if result.matched_rule else "")
            + f", {len(result.relevant_articles)} relevant article(s)"
        )

        if self.conversation_logger is not None:
            self.conversation_logger.log(
                ConversationRecord(
                    user_id=user_id,
                    message=message,
                    response=result.response_text,
                    knowledge_base_used=result.knowledge_base_used,
                )
            )

        return result
