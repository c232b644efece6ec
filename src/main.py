"""Main entry point for the workflow engine API server."""

import argparse
import logging
import os
import sys

import redis
import uvicorn

from api.app import OrchestratorAPI
from services.file_store import RedisFileStore
from services.log_service import configure_logging
from services.state_store import RedisWorkflowStore
from services.workflow_engine import WorkflowEngine

logger = logging.getLogger(__name__)


def get_redis_client() -> redis.Redis:
    """Create Redis client from environment."""
    redis_url = os.environ.get("REDIS_URL", "redis://localhost:6379")
    return redis.Redis.from_url(redis_url, decode_responses=True)


def create_engine(redis_client: redis.Redis) -> WorkflowEngine:
    """Build the workflow engine from environment settings."""
    return WorkflowEngine(
        RedisWorkflowStore(redis_client),
        RedisFileStore(redis_client),
        progress_delay=float(os.environ.get("PROGRESS_DELAY", "0")),
        fetch_workers=int(os.environ.get("FILE_FETCH_WORKERS", "4")),
    )


def create_app() -> "uvicorn.ASGIApplication":
    """Create FastAPI application with all dependencies."""
    redis_client = get_redis_client()
    engine = create_engine(redis_client)
    api = OrchestratorAPI(engine, RedisWorkflowStore(redis_client))
    return api.create_app()


def main() -> int:
    """Run the workflow engine API server."""
    parser = argparse.ArgumentParser(description="Tabular Workflow Engine API Server")
    parser.add_argument(
        "--host",
        default=os.environ.get("HOST", "0.0.0.0"),
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", "8000")),
        help="Port to bind to (default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=os.environ.get("LOG_LEVEL", "info").lower(),
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--log-dir",
        default=os.environ.get("LOG_DIR", "logs"),
        help="Directory for rotating log files (default: logs)",
    )
    args = parser.parse_args()

    configure_logging(
        log_dir=args.log_dir,
        log_file="workflow_engine.log",
        level=getattr(logging, args.log_level.upper()),
    )

    logger.info("Starting workflow engine API server")
    logger.info(f"Redis: {os.environ.get('REDIS_URL', 'redis://localhost:6379')}")

    app = create_app()
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    return 0


def get_app() -> "uvicorn.ASGIApplication":
    """Get or create the FastAPI application (for uvicorn import)."""
    return create_app()


if __name__ == "__main__":
    sys.exit(main())
