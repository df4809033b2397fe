"""
Test Chat Responder Module
==========================

Unit tests for reply composition and conversation logging.
"""

import pytest
from unittest.mock import patch
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.database import init_database
from core.exceptions import DatabaseError, InvalidInputError, ConversationLogError
from rules import templates
from rules.engine import RulesEngine
from services.knowledge_base import Article, KnowledgeBase
from services.conversation_logger import ConversationLogger, ConversationRecord
from services.chat_responder import (
    ChatResponder, ChatResponse, compose_response, compose_knowledge_base_answer
)


@pytest.fixture
def database(tmp_path):
    db = init_database(str(tmp_path / "support.db"))
    yield db
    db.close()


@pytest.fixture
def seeded_knowledge_base(database):
    kb = KnowledgeBase(database)
    kb.seed_sample_articles()
    return kb


@pytest.fixture
def responder(seeded_knowledge_base, database):
    return ChatResponder(
        knowledge_base=seeded_knowledge_base,
        conversation_logger=ConversationLogger(database, background=False),
    )


def _widget_articles(count):
    return [
        Article(title=f"Widget {i}", content=f"Widget body {i}", tags=["widget"], is_published=True)
        for i in range(1, count + 1)
    ]


class TestComposeResponse:
    """Tests for the pure reply composer."""

    @pytest.fixture
    def engine(self):
        return RulesEngine()

    def test_fallback_with_no_articles(self, engine):
        """Test the fallback text when nothing matches."""
        result = compose_response("hello there", [], engine)

        assert result.response_text == templates.FALLBACK_RESPONSE
        assert result.knowledge_base_used is False
        assert result.relevant_articles == []
        assert result.source == "fallback"

    def test_fallback_keeps_trailing_space(self):
        """Test the fallback first line keeps its trailing space."""
        assert templates.FALLBACK_RESPONSE.startswith(
            "I'd be happy to help you with your EcoRide scooter question! \n\n"
        )

    def test_rule_reply_is_case_insensitive(self, engine):
        """Test rules see the lower-cased message."""
        result = compose_response("HOW FAST IS IT?", [], engine)

        assert result.response_text == templates.SPEED_MODES
        assert result.source == "rules"
        assert result.matched_rule == "speed"

    def test_rule_reply_still_reports_articles(self, engine):
        """Test knowledge base usage is reported even when a rule answers."""
        articles = [Article(title="Top Speed", content="x", category="general", tags=["fast"])]

        result = compose_response("how fast is it", articles, engine)

        assert result.response_text == templates.SPEED_MODES
        assert result.knowledge_base_used is True
        assert result.relevant_articles == [{"title": "Top Speed", "category": "general"}]

    def test_knowledge_base_answer(self, engine):
        """Test the exact knowledge base answer layout."""
        articles = [Article(title="Brake Care", content="Adjust the cable.", category="general", tags=["brakes"])]

        result = compose_response("my brakes squeak", articles, engine)

        assert result.source == "knowledge_base"
        assert result.knowledge_base_used is True
        assert result.response_text == (
            "Based on our knowledge base, here's relevant information:\n\n"
            "**Brake Care**\nAdjust the cable.\n\n"
            + templates.KNOWLEDGE_BASE_CLOSING_PROMPT
        )

    def test_article_limits(self, engine):
        """Test at most three articles are quoted and two listed."""
        articles = _widget_articles(5)

        result = compose_response("widget help", articles, engine)

        assert result.response_text == compose_knowledge_base_answer(articles[:3])
        assert "Widget 4" not in result.response_text
        assert [a["title"] for a in result.relevant_articles] == ["Widget 1", "Widget 2"]

    def test_idempotent(self, engine):
        """Test the same inputs give the same reply."""
        articles = _widget_articles(2)

        first = compose_response("widget help", articles, engine)
        second = compose_response("widget help", articles, engine)

        assert first == second

    def test_payload_shape(self, engine):
        """Test the JSON body keys."""
        payload = compose_response("hello there", [], engine).to_payload()

        assert payload == {
            "response": templates.FALLBACK_RESPONSE,
            "knowledgeBaseUsed": False,
            "relevantArticles": [],
        }


class TestChatResponder:
    """Tests for ChatResponder against the sample articles."""

    def test_charge_question_uses_rule(self, responder):
        """Test a charging question gets the charging procedure."""
        result = responder.respond("How do I charge my scooter battery?", "u1")

        assert result.response_text == templates.CHARGING_PROCEDURE
        assert result.knowledge_base_used is True
        assert [a["title"] for a in result.relevant_articles] == [
            "How to Check Battery Status",
            "Proper Charging Procedures",
        ]

    def test_not_charging_falls_through_to_articles(self, responder):
        """Test 'charging' alone does not trigger the charging rule."""
        result = responder.respond("My scooter battery is not charging", "u1")

        assert result.source == "knowledge_base"
        assert result.response_text.startswith(templates.KNOWLEDGE_BASE_PREAMBLE)
        assert "**How to Check Battery Status**" in result.response_text
        assert "**Proper Charging Procedures**" in result.response_text
        assert result.response_text.endswith(templates.KNOWLEDGE_BASE_CLOSING_PROMPT)

    def test_wont_start(self, responder):
        """Test startup troubleshooting."""
        result = responder.respond("My scooter won't start", "u2")

        assert result.response_text == templates.WONT_START_TROUBLESHOOTING
        assert result.matched_rule == "scooter_wont_start"

    def test_helmet_question(self, responder):
        """Test safety guidance with matching articles reported."""
        result = responder.respond("Do I need a helmet?", "u3")

        assert result.response_text == templates.SAFETY_GUIDELINES
        assert result.knowledge_base_used is True
        assert result.relevant_articles == [
            {"title": "Safety Equipment and Guidelines", "category": "safety"}
        ]

    def test_fallback(self, responder):
        """Test an unrelated message gets the fallback."""
        result = responder.respond("hello there", "u4")

        assert result.response_text == templates.FALLBACK_RESPONSE
        assert result.knowledge_base_used is False
        assert result.relevant_articles == []

    def test_exchange_is_logged(self, responder, database):
        """Test every reply is recorded."""
        responder.respond("How fast is it?", "u5")

        conversations = database.get_conversations(user_id="u5")
        assert len(conversations) == 1
        assert conversations[0]["message"] == "How fast is it?"
        assert conversations[0]["response"] == templates.SPEED_MODES
        assert conversations[0]["knowledge_base_used"] is False

    def test_logging_failure_does_not_change_reply(self, seeded_knowledge_base, database):
        """Test a failing conversation write is absorbed."""
        responder = ChatResponder(
            knowledge_base=seeded_knowledge_base,
            conversation_logger=ConversationLogger(database, background=False),
        )

        with patch.object(database, "log_conversation", side_effect=DatabaseError("database is locked")) as mock_log:
            result = responder.respond("How fast is it?", "u6")

        assert result.response_text == templates.SPEED_MODES
        mock_log.assert_called_once()

    def test_read_failure_falls_back(self, database):
        """Test a failing article read still produces a reply."""
        responder = ChatResponder(knowledge_base=KnowledgeBase(database))

        with patch.object(database, "get_published_articles", side_effect=DatabaseError("no such table")):
            result = responder.respond("hello there", "u7")

        assert result.response_text == templates.FALLBACK_RESPONSE

    def test_read_failure_keeps_rule_reply(self, seeded_knowledge_base, database):
        """Test a failing article read still lets a rule answer, without articles."""
        responder = ChatResponder(knowledge_base=seeded_knowledge_base)

        with patch.object(database, "get_published_articles", side_effect=DatabaseError("no such table")):
            result = responder.respond("Do I need a helmet?", "u8")

        assert result.response_text == templates.SAFETY_GUIDELINES
        assert result.knowledge_base_used is False
        assert result.relevant_articles == []

    @pytest.mark.parametrize("message,user_id", [("", "u1"), ("hi", ""), (None, "u1")])
    def test_missing_fields(self, responder, message, user_id):
        """Test empty message or user is rejected."""
        with pytest.raises(InvalidInputError):
            responder.respond(message, user_id)


class TestConversationLogger:
    """Tests for ConversationLogger."""

    def test_background_write(self, database):
        """Test background writes land after wait()."""
        conversation_logger = ConversationLogger(database, background=True)

        conversation_logger.log(ConversationRecord("u1", "hi", "hello", True))
        conversation_logger.wait(timeout=5)

        conversations = database.get_conversations()
        assert len(conversations) == 1
        assert conversations[0]["knowledge_base_used"] is True

    def test_disabled(self, database):
        """Test a disabled logger drops records."""
        conversation_logger = ConversationLogger(database, background=False, enabled=False)

        conversation_logger.log(ConversationRecord("u1", "hi", "hello", False))

        assert database.get_conversations() == []

    def test_write_raises(self, database, monkeypatch):
        """Test synchronous write surfaces failures."""
        def broken(**kwargs):
            raise DatabaseError("read-only database")

        monkeypatch.setattr(database, "log_conversation", broken)
        conversation_logger = ConversationLogger(database, background=False)

        with pytest.raises(ConversationLogError):
            conversation_logger.write(ConversationRecord("u1", "hi", "hello", False))

        assert conversation_logger.log(ConversationRecord("u1", "hi", "hello", False)) is None
        assert database.get_conversations() == []

    def test_record_timestamp(self):
        """Test records are stamped on creation."""
        record = ConversationRecord("u1", "hi", "hello", False)
        assert record.created_at
        assert record.to_dict()["user_id"] == "u1"


class TestChatResponse:
    """Tests for ChatResponse."""

    def test_defaults(self):
        response = ChatResponse(response_text="x", knowledge_base_used=False)
        assert response.relevant_articles == []
        assert response.source == "fallback"
        assert response.matched_rule is None
