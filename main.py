"""
Main entrypoint: API server (with background score refresher) or one-off refresh jobs.

Usage:
  python main.py serve                  # FastAPI + periodic stale-score refresher
  python main.py update-all             # refresh every dev once, then exit
  python main.py update-stale           # refresh devs older than SCORE_STALE_AFTER_SEC
  python main.py update-dev <dev_id>    # refresh a single dev
  python main.py init-db                # create devs/tokens tables
  python main.py detect-rugs <file>     # mark tokens rugged from a {contract_address: liquidity_usd} JSON file

Env: DATABASE_URL or DEVSCORE_DB_PATH, API_HOST, API_PORT, ADMIN_API_KEY, SCORE_*, LOG_LEVEL, LOG_FORMAT.
"""

from __future__ import annotations

import argparse
import json
import sys

# Configure structured JSON logging before other imports that may log
from backend_devscore.devscore_logging import configure_structlog, get_logger

logger = get_logger("main")


def _serve() -> int:
    import uvicorn

    from backend_devscore.api_server.server import app
    from backend_devscore.config import get_settings

    settings = get_settings()
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dev reputation score service.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("serve", help="Run the HTTP API and background refresher.")
    sub.add_parser("update-all", help="Refresh every dev score once.")
    sub.add_parser("update-stale", help="Refresh devs whose score is stale.")
    one = sub.add_parser("update-dev", help="Refresh a single dev score.")
    one.add_argument("dev_id", help="devs.id of the dev to refresh")
    sub.add_parser("init-db", help="Create tables if missing.")
    rugs = sub.add_parser("detect-rugs", help="Mark tokens whose liquidity collapsed as rugged.")
    rugs.add_argument("liquidity_file", help="JSON object: contract_address -> current liquidity (USD)")
    args = parser.parse_args(argv)

    from backend_devscore.config import get_settings

    settings = get_settings()
    configure_structlog(settings.log_format, settings.log_level)

    if args.command == "serve":
        return _serve()

    from backend_devscore.database import get_storage

    storage = get_storage(settings.database_url)

    if args.command == "init-db":
        logger.info("main_db_initialized")
        return 0
    if args.command == "update-all":
        from backend_devscore.agent_worker.runner import update_all_dev_scores

        update_all_dev_scores(storage)
        return 0
    if args.command == "update-stale":
        from backend_devscore.agent_worker.runner import update_stale_dev_scores

        processed = update_stale_dev_scores(
            storage,
            stale_after_sec=settings.stale_after_sec,
            limit=settings.refresh_batch_limit,
        )
        logger.info("main_update_stale_done", processed=processed)
        return 0
    if args.command == "update-dev":
        from backend_devscore.analysis_engine.dev_stats import update_dev_stats

        try:
            result = update_dev_stats(storage, args.dev_id)
        except Exception as e:
            logger.exception("main_update_dev_failed", dev_id=args.dev_id, error=str(e))
            return 1
        if result is None:
            logger.warning("main_update_dev_no_tokens", dev_id=args.dev_id)
        return 0
    if args.command == "detect-rugs":
        from backend_devscore.analysis_engine.rug_detection import detect_rug_pulls

        try:
            with open(args.liquidity_file, encoding="utf-8") as f:
                observations = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("main_liquidity_file_unreadable", path=args.liquidity_file, error=str(e))
            return 1
        if not isinstance(observations, dict):
            logger.error("main_liquidity_file_invalid", path=args.liquidity_file)
            return 1
        rugged = detect_rug_pulls(storage, observations)
        logger.info("main_detect_rugs_done", rugged=len(rugged))
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
