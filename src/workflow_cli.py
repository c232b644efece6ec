"""CLI for running a stored workflow to completion."""

import argparse
import json
import logging
import os
import sys

from main import create_engine, get_redis_client
from services.state_store import WorkflowNotFoundError
from services.workflow_engine import TaskExecutionError

logger = logging.getLogger(__name__)


def main() -> int:
    """Run every outstanding task of a workflow and print a summary."""
    parser = argparse.ArgumentParser(description="Workflow Runner")
    parser.add_argument(
        "workflow_id",
        help="Workflow ID to run",
    )
    parser.add_argument(
        "--owner-id",
        default=None,
        help="Owner the workflow must belong to",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=os.environ.get("LOG_LEVEL", "info").lower(),
        help="Log level (default: info)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info(f"Running workflow {args.workflow_id}")

    engine = create_engine(get_redis_client())

    try:
        executions = engine.run_workflow(args.workflow_id, args.owner_id)
    except WorkflowNotFoundError:
        logger.error(f"Workflow {args.workflow_id} not found")
        return 1
    except TaskExecutionError as e:
        logger.error(str(e))
        return 1

    state = engine.get_workflow_status(args.workflow_id)
    summary = {
        "workflow_id": args.workflow_id,
        "status": state.status.value,
        "tasks": [
            {
                "task_id": e.task_id,
                "status": e.status.value,
                "records_processed": e.metrics.records_processed,
                "errors_found": len(e.metrics.errors_found or []),
            }
            for e in executions
        ],
    }
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
