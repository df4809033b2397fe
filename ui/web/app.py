"""
FastAPI Application - Main web application setup
===============================================

This module creates and configures the FastAPI application
with the chat API, the analytics dashboard and middleware.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from core.config import Config, load_config
from core.database import Database, init_database
from core.logging import setup_logging, get_logger
from rules.engine import RulesEngine
from rules import templates as responses
from services.knowledge_base import KnowledgeBase
from services.conversation_logger import ConversationLogger
from services.chat_responder import ChatResponder

logger = get_logger("web.app")


def create_app(
    config: Optional[Config] = None,
    database: Optional[Database] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        database: Database instance
        debug: Enable debug mode

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = load_config()

    setup_logging(
        log_dir=config.log_dir or None,
        log_level="DEBUG" if debug else "INFO",
        console_output=True
    )

    if database is None:
        database = init_database(config.database_path)

    # Initialize services
    knowledge_base = KnowledgeBase(database)

    if config.knowledge_base.seed_sample_articles:
        knowledge_base.seed_sample_articles()

    conversation_logger = ConversationLogger(
        database,
        background=config.chat.background_logging,
        enabled=config.chat.log_conversations
    )

    rules_engine = RulesEngine()

    chat_responder = ChatResponder(
        knowledge_base=knowledge_base,
        conversation_logger=conversation_logger,
        rules_engine=rules_engine
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Let in-flight conversation writes land before exiting
        conversation_logger.wait(timeout=5)

    app = FastAPI(
        title=config.app_name,
        description="EcoRide customer support chat API",
        version=config.version,
        debug=debug or config.debug,
        lifespan=lifespan,
    )

    # The chat widget is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ui.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    templates_dir = Path(__file__).parent / "templates"

    # Store services in app state
    app.state.config = config
    app.state.database = database
    app.state.knowledge_base = knowledge_base
    app.state.conversation_logger = conversation_logger
    app.state.rules_engine = rules_engine
    app.state.chat_responder = chat_responder
    app.state.templates = Jinja2Templates(directory=str(templates_dir))

    from .routes import router as main_router
    app.include_router(main_router, prefix="")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": responses.ERROR_MESSAGE, "response": responses.APOLOGY_RESPONSE}
        )

    logger.info("Web application created")

    return app


def run_app(
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    config: Optional[Config] = None
) -> None:
    """
    Run the web application server.

    Args:
        host: Host address to bind
        port: Port to listen on
        debug: Enable debug mode
        config: Application configuration
    """
    if config is None:
        config = load_config()

    app = create_app(config=config, debug=debug)

    logger.info(f"Starting web server on {host}:{port}")

    import uvicorn
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="debug" if debug else "info"
    )
