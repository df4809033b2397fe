#!/usr/bin/env python3
"""
EcoRide Support Agent - Main Entry Point
========================================

This is the main entry point for the support agent. It provides a
command-line interface for running the web API and for trying the
chat assistant locally.

Usage:
    python main.py --web          # Start web API and dashboard
    python main.py --test "..."   # Answer one message from the terminal
    python main.py --seed         # Insert the sample help articles
    python main.py --status       # Check system status
    python main.py --setup        # Write a default config.yaml
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, create_default_config, Config
from core.database import init_database
from core.logging import setup_logging, get_logger
from core.exceptions import SupportAgentError

logger = get_logger("main")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="EcoRide Support Agent - customer support chat backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --web                       Start web API on default port
  python main.py --web --port 9000           Start web API on port 9000
  python main.py --test "How fast is it?"    Answer a message locally
  python main.py --seed                      Insert sample articles
  python main.py --status                    Check system status
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--web",
        action="store_true",
        help="Start web API server"
    )
    mode_group.add_argument(
        "--status",
        action="store_true",
        help="Check system status"
    )
    mode_group.add_argument(
        "--test",
        nargs="+",
        metavar=("MESSAGE", "USER_ID"),
        help="Answer a message (usage: --test 'My battery won't charge' [USER_ID])"
    )
    mode_group.add_argument(
        "--seed",
        action="store_true",
        help="Insert the sample knowledge base articles"
    )
    mode_group.add_argument(
        "--setup",
        action="store_true",
        help="Write a default configuration file"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for web API (default: from config, 8080)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host for web API (default: from config, 127.0.0.1)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser.parse_args(argv)


def run_setup() -> None:
    """Write a default configuration and create the data directories."""
    config = create_default_config()

    print("\n" + "=" * 50)
    print("EcoRide Support Agent Setup")
    print("=" * 50 + "\n")
    print(f"✓ Configuration written to {Path(config.config_dir) / 'config.yaml'}")
    print(f"  Data directory: {config.data_dir}")
    print(f"  Log directory:  {config.log_dir}")
    print("\nNext steps:")
    print("  python main.py --seed   # Add sample help articles")
    print("  python main.py --web    # Start the web API")


def run_status_check(config: Config) -> None:
    """Print database, rule table and configuration status."""
    from rules.engine import RulesEngine

    database = init_database(config.database_path)
    stats = database.get_statistics()
    chat_stats = database.get_chat_statistics(limit=config.ui.recent_conversations)

    print("\n" + "=" * 50)
    print("EcoRide Support Agent - System Status")
    print("=" * 50 + "\n")

    print("Knowledge Base")
    print("-" * 30)
    print(f"  Database: {config.database_path}")
    print(f"  Published articles: {stats['articles']['published']}")
    print(f"  Draft articles: {stats['articles']['draft']}")

    print("\nConversations")
    print("-" * 30)
    print(f"  Logged: {stats['conversations']}")
    print(f"  Knowledge base used: {stats['knowledge_base_used']}")
    print(f"  Unique users (last {config.ui.recent_conversations}): {chat_stats['unique_users']}")

    print("\nRule Table")
    print("-" * 30)
    for position, rule in enumerate(RulesEngine().get_all_rules(), start=1):
        print(f"  {position}. {rule.name}")

    print("\nConfiguration")
    print("-" * 30)
    print(f"  Conversation logging: {'Enabled' if config.chat.log_conversations else 'Disabled'}")
    print(f"  Background writes: {'Yes' if config.chat.background_logging else 'No'}")
    print(f"  Web API: {config.ui.web_host}:{config.ui.web_port}")

    print("\n" + "=" * 50 + "\n")


def run_seed(config: Config) -> None:
    """Insert the sample articles."""
    from services.knowledge_base import KnowledgeBase

    database = init_database(config.database_path)
    inserted = KnowledgeBase(database).seed_sample_articles()

    if inserted:
        print(f"✓ Inserted {inserted} sample articles")
    else:
        print("Sample articles already present, nothing to do")


def run_test_message(config: Config, message: str, user_id: str = "cli-user") -> None:
    """Answer one message and print the reply with its metadata."""
    from services.knowledge_base import KnowledgeBase
    from services.conversation_logger import ConversationLogger
    from services.chat_responder import ChatResponder

    print(f"\nTest Message: {message}")
    print(f"User: {user_id}")
    print("-" * 50)

    database = init_database(config.database_path)
    responder = ChatResponder(
        knowledge_base=KnowledgeBase(database),
        conversation_logger=ConversationLogger(
            database,
            background=False,
            enabled=config.chat.log_conversations
        ),
    )

    result = responder.respond(message, user_id)

    print("\nResponse:")
    print(f"  Source: {result.source}")
    if result.matched_rule:
        print(f"  Rule: {result.matched_rule}")
    print(f"  Knowledge base used: {result.knowledge_base_used}")
    for article in result.relevant_articles:
        print(f"  Article: {article['title']} ({article['category']})")
    print()
    print(result.response_text)


def run_web_ui(config: Config, host: str, port: int, debug: bool) -> None:
    """Run the web API server."""
    from ui.web.app import run_app

    print(f"\nStarting Web API on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    run_app(host=host, port=port, debug=debug, config=config)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        if args.setup:
            run_setup()
            return 0

        config = load_config(args.config)

        if args.debug:
            config.debug = True

        setup_logging(
            log_dir=config.log_dir,
            log_level="DEBUG" if args.debug else "INFO",
            console_output=True
        )

        if args.web:
            host = args.host or config.ui.web_host
            port = args.port or config.ui.web_port
            run_web_ui(config, host, port, args.debug)
        elif args.seed:
            run_seed(config)
        elif args.test:
            message = args.test[0]
            user_id = args.test[1] if len(args.test) > 1 else "cli-user"
            run_test_message(config, message, user_id)
        else:
            run_status_check(config)
            if not args.status:
                print("No mode specified. Use --web, --test, --seed or --help")

        return 0

    except SupportAgentError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0
    except Exception as e:
        print(f"\nUnexpected error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
