"""
Main entry point for the Cricket Digest.

This module provides multiple ways to run the application:

1. API Server Mode (default):
   python -m cricket_digest.main
   python -m cricket_digest.main serve

2. Report Run Mode (one-shot, e.g. from cron):
   python -m cricket_digest.main run

3. Crawl Check Mode (fetch only, nothing is emailed):
   python -m cricket_digest.main crawl
   python -m cricket_digest.main crawl --report

How This Works:
- The CLI uses argparse for argument parsing
- Each command (serve, run, crawl) maps to an async function
- asyncio.run() is used to run the async functions
- structlog provides structured logging throughout
"""

# Load .env into os.environ BEFORE importing LangChain modules
from dotenv import load_dotenv

load_dotenv()

import argparse
import asyncio
import logging
import sys

import structlog
import uvicorn

from cricket_digest.config import Settings, get_settings

# ========================================
# LOGGING CONFIGURATION
# structlog provides structured, context-aware logging
# ========================================

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),  # Pretty console output for development
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


# ========================================
# COMMAND FUNCTIONS
# ========================================


async def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """
    Start the FastAPI server.

    Uses uvicorn as the ASGI server. The API endpoints are defined
    in cricket_digest/api.py.
    """
    logger.info("Starting API server", host=host, port=port, reload=reload)

    config = uvicorn.Config(
        "cricket_digest.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )
    server = uvicorn.Server(config)
    await server.serve()


async def run_report(settings: Settings) -> int:
    """
    Run the daily report once.

    Returns:
        Process exit code (0 on success, 1 on failure)
    """
    from cricket_digest.graph import run_daily_report

    logger.info("Running daily cricket report")

    try:
        result = await run_daily_report(settings)
    except Exception as e:
        logger.error("Cricket report process failed", error=str(e))
        print(f"\nCricket report failed: {e}")
        return 1

    print("\n" + "=" * 60)
    print("Cricket Report Complete")
    print("=" * 60)
    print(f"Status: {result.message}")
    print(f"Articles: {result.article_count}")
    if result.sources:
        print(f"Sources: {', '.join(result.sources)}")
    return 0


async def run_crawl(settings: Settings, with_report: bool = False) -> int:
    """
    Crawl every source and print what came back. Nothing is emailed.

    With with_report, also writes a report for the top 5 articles and
    prints the start of it.
    """
    from cricket_digest.graph.nodes.collect import collect_articles
    from cricket_digest.graph.nodes.deduplicate import deduplicate_articles
    from cricket_digest.graph.nodes.rank import rank_articles
    from cricket_digest.graph.orchestrator import build_components

    components = build_components(settings)
    config = components.config

    print("Testing cricket news crawling...\n")

    for adapter in components.adapters:
        articles, errors = await collect_articles([adapter])
        status = f"{len(articles)} articles"
        if errors:
            status += f" (failed: {errors[0]['error_message']})"
        print(f"{adapter.name}: {status}")

    articles, _ = await collect_articles(components.adapters)
    ranked = rank_articles(
        deduplicate_articles(
            articles,
            significant_words=config.dedup_significant_words,
            min_word_length=config.dedup_min_word_length,
            min_key_length=config.dedup_min_key_length,
        ),
        limit=config.max_articles,
        keywords=config.recency_keywords,
    )
    print(f"\nTotal articles found: {len(ranked)}\n")

    if not ranked:
        return 1

    print("Sample articles:")
    for index, article in enumerate(ranked[:3], start=1):
        print(f"{index}. {article.title} ({article.source})")

    if with_report:
        summarizer = components.summarizer
        print("\nGenerating AI report...")
        try:
            report = await summarizer.generate(ranked[:5])
        except Exception as e:
            logger.error("Report generation failed", error=str(e), error_type=type(e).__name__)
            print(f"\nReport generation failed: {e}")
            return 1
        print("\nReport preview:")
        print(report[:500] + "...\n")

    return 0


# ========================================
# CLI ENTRY POINT
# ========================================


def main():
    """
    Main entry point with CLI argument parsing.

    Supports three commands:
    - serve: Start the API server
    - run: Run the daily report once
    - crawl: Check the sources without sending anything
    """
    parser = argparse.ArgumentParser(
        description="Cricket Digest - Daily cricket news report by email",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cricket_digest.main serve             # Start API server
  python -m cricket_digest.main serve --port 8080 # Custom port
  python -m cricket_digest.main run               # Send today's report
  python -m cricket_digest.main crawl --report    # Dry run with report preview
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # ========================================
    # serve command
    # ========================================
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    # ========================================
    # run command
    # ========================================
    subparsers.add_parser("run", help="Run the daily report once")

    # ========================================
    # crawl command
    # ========================================
    crawl_parser = subparsers.add_parser("crawl", help="Crawl sources without sending email")
    crawl_parser.add_argument(
        "--report",
        action="store_true",
        help="Also generate (but not send) a report for the top 5 articles",
    )

    args = parser.parse_args()

    # Default to 'serve' if no command specified
    if args.command is None:
        args.command = "serve"
        args.host = "0.0.0.0"
        args.port = 8000
        args.reload = False

    # ========================================
    # Validate settings early
    # This catches configuration errors before starting
    # ========================================
    try:
        settings = get_settings()
    except Exception as e:
        logger.error("Failed to load settings", error=str(e))
        print(f"\nConfiguration Error: {e}")
        print("\nMake sure you have a .env file with required settings.")
        print(
            "Required variables: ANTHROPIC_API_KEY, EMAIL_USER, EMAIL_PASSWORD, "
            "REPORT_RECIPIENT_EMAIL"
        )
        sys.exit(1)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level.upper())
    logger.debug("Settings loaded", log_level=settings.log_level, source_count=len(settings.sources))

    # ========================================
    # Run the appropriate command
    # ========================================
    if args.command == "serve":
        asyncio.run(run_server(host=args.host, port=args.port, reload=args.reload))
    elif args.command == "run":
        sys.exit(asyncio.run(run_report(settings)))
    elif args.command == "crawl":
        sys.exit(asyncio.run(run_crawl(settings, with_report=args.report)))


if __name__ == "__main__":
    main()
