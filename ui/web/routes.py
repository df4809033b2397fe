"""
Web Routes - Chat API, analytics and knowledge base endpoints
=============================================================

This module defines all web routes for the support agent.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Request, Query
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ValidationError

from core.logging import get_logger, set_log_context, clear_log_context
from core.exceptions import InvalidInputError
from rules import templates as responses

logger = get_logger("web.routes")

router = APIRouter()


class ChatRequest(BaseModel):
    """Chat request body."""
    message: Optional[str] = None
    userId: Optional[str] = None


def _error_response(status_code: int, body: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body)


def _server_error() -> JSONResponse:
    return _error_response(
        500,
        {"error": responses.ERROR_MESSAGE, "response": responses.APOLOGY_RESPONSE}
    )


# === Page Routes ===

@router.get("/", response_class=HTMLResponse)
async def dashboard(request: Request):
    """Render the chat analytics dashboard."""
    templates = request.app.state.templates
    database = request.app.state.database
    config = request.app.state.config

    limit = config.ui.recent_conversations

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "app_name": config.app_name,
            "stats": database.get_chat_statistics(limit=limit),
            "conversations": database.get_conversations(limit=limit),
        }
    )


# === API Routes ===

@router.post("/api/chat")
async def chat(request: Request):
    """
    Answer a support chat message.

    Body: {"message": str, "userId": str}. Missing fields give a 400;
    anything unexpected gives a 500 carrying an apology reply.
    """
    chat_responder = request.app.state.chat_responder

    try:
        payload = await request.json()
    except Exception as e:
        logger.error(f"Error in chat support: unreadable body: {e}")
        return _server_error()

    try:
        chat_request = ChatRequest.model_validate(payload)
    except ValidationError:
        return _error_response(400, {"error": responses.MISSING_FIELDS_ERROR})

    if not chat_request.message or not chat_request.userId:
        return _error_response(400, {"error": responses.MISSING_FIELDS_ERROR})

    set_log_context(user_id=chat_request.userId)
    try:
        result = chat_responder.respond(chat_request.message, chat_request.userId)
        return result.to_payload()
    except InvalidInputError as e:
        return _error_response(400, {"error": e.message})
    except Exception as e:
        logger.error(f"Error in chat support: {e}", exc_info=True)
        return _server_error()
    finally:
        clear_log_context()


@router.get("/api/analytics")
async def get_analytics(
    request: Request,
    limit: int = Query(50, ge=1, le=500)
):
    """Chat statistics and recent conversations."""
    database = request.app.state.database

    return {
        "stats": database.get_chat_statistics(limit=limit),
        "conversations": database.get_conversations(limit=limit),
    }


@router.get("/api/knowledge-base")
async def list_articles(
    request: Request,
    search: str = Query(""),
    category: str = Query("all")
):
    """Browse articles by title/content text and category."""
    knowledge_base = request.app.state.knowledge_base

    articles = knowledge_base.search(term=search, category=category)
    return {"articles": [article.to_dict() for article in articles]}


@router.get("/api/status")
async def get_status(request: Request):
    """Get system status."""
    database = request.app.state.database
    rules_engine = request.app.state.rules_engine
    config = request.app.state.config

    return {
        "database": database.get_statistics(),
        "rules": [rule.name for rule in rules_engine.get_all_rules()],
        "conversation_logging": {
            "enabled": config.chat.log_conversations,
            "background": config.chat.background_logging,
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
