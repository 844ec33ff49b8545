"""Command-line entrypoint for the job queue service.

Loads settings, configures logging, then serves the API or prints the persisted
queue summary.
"""

import argparse
import asyncio
import json

import uvicorn

from app.bootstrap import bootstrap_create_application
from app.config import config_configure_logging, config_load_settings
from app.domain import Snapshot
from app.store import JsonSnapshotStore


def main() -> None:
    """Parse the command line and run the `api` or `status` command.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Clearance job queue runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "status"),
        help="Runtime command: `api` starts server, `status` prints persisted queue counters",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(settings.log_level)

    if parsed_arguments.command == "status":
        store = JsonSnapshotStore(snapshot_path=settings.snapshot_path)
        snapshot = asyncio.run(store.store_read())
        print(json.dumps(main_summarize_snapshot(snapshot), indent=2))
        return

    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        timeout_keep_alive=int(settings.socket_timeout_seconds),
        log_config=None,
    )


def main_summarize_snapshot(snapshot: Snapshot) -> dict[str, object]:
    """Summarize a persisted snapshot for operators.

    Args:
        snapshot: Snapshot read from the store.

    Returns:
        dict[str, object]: Counters and metadata of the snapshot.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "version": snapshot.meta.version,
        "lastWriteAt": snapshot.meta.last_write_at.isoformat() if snapshot.meta.last_write_at else None,
        "queueLength": len(snapshot.queue),
        "inflight": [job.job_id for job in snapshot.inflight],
        "resultCount": len(snapshot.results),
        "nextJobId": snapshot.queue[0].job_id if snapshot.queue else None,
    }


if __name__ == "__main__":
    main()
